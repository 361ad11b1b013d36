"""Atomic order-creation routines.

An order is created by a single routine receiving the requesting user and a
JSON array of ``{"product_id", "quantity", "unit_price"}`` lines. The routine
checks every product and its stock, decrements stock, computes the total and
inserts the order with all of its items, returning the new order id.

PostgreSQL runs the ``create_order`` function installed by the migrations.
Other engines run :class:`SessionOrderRoutine`, which performs the same steps
through the ORM. Callers wrap either routine in a SAVEPOINT so a failure leaves
no partial rows behind.
"""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from sqlalchemy import select, text
from sqlalchemy.orm import Session

from commerce_api.models.base import quantize_money
from commerce_api.models.order import Order, OrderItem
from commerce_api.models.product import Product
from commerce_api.models.user import User
from commerce_api.services._shared.errors import ConflictError, NotFoundError

#: SQLSTATEs raised by the PostgreSQL ``create_order`` function.
PG_NOT_FOUND_SQLSTATE = "P0002"  # no_data_found
PG_INSUFFICIENT_STOCK_SQLSTATE = "CS001"  # custom, so CHECK failures stay distinct


@dataclass(frozen=True, slots=True)
class OrderLine:
    """One requested order line; ``unit_price`` is the price snapshot."""

    product_id: int
    quantity: int
    unit_price: Decimal


class CreateOrderRoutine(Protocol):
    def __call__(self, session: Session, user_id: int, items_json: str) -> int: ...


def serialize_lines(lines: Iterable[OrderLine]) -> str:
    """Serialize order lines to the JSON payload consumed by the routines.

    Prices travel as strings so no precision is lost on the way.
    """
    return json.dumps(
        [
            {
                "product_id": int(line.product_id),
                "quantity": int(line.quantity),
                "unit_price": str(quantize_money(line.unit_price)),
            }
            for line in lines
        ]
    )


def parse_lines(items_json: str) -> list[OrderLine]:
    """Inverse of :func:`serialize_lines`."""
    return [
        OrderLine(
            product_id=int(raw["product_id"]),
            quantity=int(raw["quantity"]),
            unit_price=quantize_money(raw["unit_price"]),
        )
        for raw in json.loads(items_json)
    ]


def order_total(lines: Iterable[OrderLine]) -> Decimal:
    """Return Σ quantity × unit_price rounded to two decimals."""
    total = sum((line.unit_price * line.quantity for line in lines), Decimal("0"))
    return quantize_money(total)


class PostgresOrderRoutine:
    """Delegate to the server-side ``create_order(user_id, items json)``."""

    def __call__(self, session: Session, user_id: int, items_json: str) -> int:
        result = session.execute(
            text("SELECT create_order(:user_id, CAST(:items AS json))"),
            {"user_id": user_id, "items": items_json},
        )
        return int(result.scalar_one())


class SessionOrderRoutine:
    """ORM rendition of ``create_order`` for engines without stored routines."""

    def __call__(self, session: Session, user_id: int, items_json: str) -> int:
        lines = parse_lines(items_json)

        if session.get(User, user_id) is None:
            raise NotFoundError("User", user_id)

        product_ids = sorted({line.product_id for line in lines})
        # Row locks where the engine supports them; ignored by SQLite
        stmt = select(Product).where(Product.id.in_(product_ids)).with_for_update()
        products = {p.id: p for p in session.execute(stmt).scalars()}

        for product_id in product_ids:
            if product_id not in products:
                raise NotFoundError("Product", product_id)

        requested: Counter[int] = Counter()
        for line in lines:
            requested[line.product_id] += line.quantity

        for product_id, quantity in requested.items():
            if products[product_id].stock < quantity:
                raise ConflictError("Product", f"insufficient stock for product {product_id}")

        for product_id, quantity in requested.items():
            products[product_id].stock -= quantity

        order = Order(
            user_id=user_id,
            total=order_total(lines),
            items=[
                OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in lines
            ],
        )
        session.add(order)
        session.flush()
        return order.id


def routine_for_dialect(dialect_name: str) -> CreateOrderRoutine:
    """Pick the order routine matching the SQL dialect."""
    if dialect_name == "postgresql":
        return PostgresOrderRoutine()
    return SessionOrderRoutine()


__all__ = [
    "CreateOrderRoutine",
    "OrderLine",
    "PostgresOrderRoutine",
    "SessionOrderRoutine",
    "order_total",
    "parse_lines",
    "routine_for_dialect",
    "serialize_lines",
]
