"""DTOs for ProductService."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from commerce_api.models.product import Product


@dataclass(frozen=True, slots=True)
class ProductIn:
    """
    Input DTO for creating or replacing a product.

    :param name: Display name (required).
    :type name: str
    :param sku: Unique stock-keeping unit (required).
    :type sku: str
    :param price: List price, strictly positive.
    :type price: Decimal
    :param stock: Units on hand, not negative.
    :type stock: int
    :param category: Optional category.
    :type category: str | None
    """

    name: str
    sku: str
    price: Decimal
    stock: int = 0
    category: str | None = None


@dataclass(frozen=True, slots=True)
class ProductOut:
    id: int
    name: str
    sku: str
    price: Decimal
    stock: int
    category: str | None

    @classmethod
    def from_model(cls, product: Product) -> ProductOut:
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            price=product.price,
            stock=product.stock,
            category=product.category,
        )
