"""Order aggregate: an order exclusively owns its items."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commerce_api.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .product import Product
    from .user import User


class Order(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Purchase placed by a user.

    ``total`` is computed by the order-creation routine from the items and is
    never accepted from clients. Items are deleted together with the order.
    """

    __tablename__ = "orders"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))

    user: Mapped[User] = relationship(back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
    )

    __table_args__ = (Index("ix_orders_user_id", "user_id"),)


class OrderItem(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Line of an order.

    ``unit_price`` is a snapshot taken at purchase time and does not follow
    later product price changes. ``product`` is a display-only reference.
    """

    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Product] = relationship(lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("unit_price > 0", name="unit_price_positive"),
        Index("ix_order_items_order_id", "order_id"),
    )

    @property
    def product_name(self) -> str:
        """Product name when the product was fetched alongside the item."""
        loaded = self.__dict__.get("product")
        return loaded.name if loaded is not None else ""
