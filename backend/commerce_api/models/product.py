"""Product catalog model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import CheckConstraint, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from commerce_api.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin


class Product(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Sellable product.

    Fields
    ------
    name : str
        Display name; searched case-insensitively by substring.
    sku : str
        Unique stock-keeping unit.
    price : Decimal
        Current list price, strictly positive.
    stock : int
        Units on hand, never negative.
    category : str | None
        Optional free-form category used for exact-match filtering.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("sku", name="uq_products_sku"),
        CheckConstraint("price > 0", name="price_positive"),
        CheckConstraint("stock >= 0", name="stock_non_negative"),
        Index("ix_products_category", "category"),
    )

    @validates("name", "sku")
    def _strip_required(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} is required.")
        return value.strip()
