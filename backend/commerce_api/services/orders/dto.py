"""DTOs for OrderService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from commerce_api.models.order import Order, OrderItem


@dataclass(frozen=True, slots=True)
class OrderItemIn:
    """
    One requested order line.

    :param product_id: Product to buy.
    :type product_id: int
    :param quantity: Units, strictly positive.
    :type quantity: int
    :param unit_price: Price snapshot, strictly positive.
    :type unit_price: Decimal
    """

    product_id: int
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True, slots=True)
class OrderItemOut:
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal

    @classmethod
    def from_model(cls, item: OrderItem) -> OrderItemOut:
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
        )


@dataclass(frozen=True, slots=True)
class OrderSummaryOut:
    """Thin projection used in listings: no items."""

    id: int
    user_id: int
    total: Decimal
    created_at: datetime | None

    @classmethod
    def from_model(cls, order: Order) -> OrderSummaryOut:
        return cls(id=order.id, user_id=order.user_id, total=order.total, created_at=order.created_at)


@dataclass(frozen=True, slots=True)
class OrderOut:
    """Full projection: the order with its items."""

    id: int
    user_id: int
    total: Decimal
    created_at: datetime | None
    items: tuple[OrderItemOut, ...]

    @classmethod
    def from_model(cls, order: Order) -> OrderOut:
        return cls(
            id=order.id,
            user_id=order.user_id,
            total=order.total,
            created_at=order.created_at,
            items=tuple(OrderItemOut.from_model(i) for i in order.items),
        )
