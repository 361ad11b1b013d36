# commerce_api/services/products/service.py
from __future__ import annotations

import logging
from decimal import Decimal

from commerce_api.models.base import quantize_money
from commerce_api.models.product import Product
from commerce_api.services._shared.base import BaseService
from commerce_api.services._shared.errors import ConflictError, NotFoundError
from commerce_api.services.products.dto import ProductIn, ProductOut

logger = logging.getLogger(__name__)


class ProductService(BaseService):
    """Catalogue management: filtered listing and admin writes."""

    def list(self, category: str | None = None, name: str | None = None) -> list[ProductOut]:
        """
        List products filtered by exact category and/or name fragment.

        :param category: Exact category filter.
        :param name: Case-insensitive substring of the name.
        :returns: Matching products ordered by id.
        """
        with self.uow() as uow:
            products = uow.products.list_filtered(category=category or None, name=name or None)
            return [ProductOut.from_model(p) for p in products]

    def get(self, product_id: int) -> ProductOut:
        with self.uow() as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            return ProductOut.from_model(product)

    def create(self, dto: ProductIn) -> ProductOut:
        """
        Create a product.

        :raises ValidationError: On missing name/sku, non-positive price or negative stock.
        :raises ConflictError: If the SKU already exists.
        """
        fields = self._validated_fields(dto)
        with self.uow() as uow:
            if uow.products.get_by_sku(fields["sku"]) is not None:
                raise ConflictError("Product", f"sku '{fields['sku']}' already exists")
            product = Product(**fields)
            uow.products.add(product)
            uow.save()
        logger.info("Product created", extra={"endpoint": "products.create"})
        return ProductOut.from_model(product)

    def update(self, product_id: int, dto: ProductIn) -> ProductOut:
        """
        Replace every field of a product.

        :raises NotFoundError: If the product does not exist.
        :raises ConflictError: If the new SKU belongs to another product.
        """
        fields = self._validated_fields(dto)
        with self.uow() as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise NotFoundError("Product", product_id)
            other = uow.products.get_by_sku(fields["sku"])
            if other is not None and other.id != product.id:
                raise ConflictError("Product", f"sku '{fields['sku']}' already exists")
            uow.products.assign_updates(product, fields)
            uow.save()
        return ProductOut.from_model(product)

    def delete(self, product_id: int) -> None:
        """
        Delete a product.

        :raises NotFoundError: If the product does not exist.
        :raises ConflictError: If order items still reference it.
        """
        with self.uow() as uow:
            if not uow.products.delete_by_id(product_id):
                raise NotFoundError("Product", product_id)
            uow.save()

    # ------------------------------------------------------------------ #

    def _validated_fields(self, dto: ProductIn) -> dict[str, object]:
        name = (dto.name or "").strip()
        sku = (dto.sku or "").strip()
        errors: dict[str, list[str]] = {"name": [], "sku": [], "price": [], "stock": []}
        if not name:
            errors["name"].append("Name is required.")
        if not sku:
            errors["sku"].append("SKU is required.")
        price: Decimal | None = None
        if dto.price is not None and Decimal(str(dto.price)).is_finite():
            price = quantize_money(dto.price)
        # Checked after rounding so 0.001 cannot slip through as 0.00
        if price is None or price <= 0:
            errors["price"].append("Price must be greater than zero.")
        if dto.stock is None or int(dto.stock) < 0:
            errors["stock"].append("Stock cannot be negative.")
        self.raise_if_errors(errors)
        category = (dto.category or "").strip() or None
        return {
            "name": name,
            "sku": sku,
            "price": price,
            "stock": int(dto.stock),
            "category": category,
        }
