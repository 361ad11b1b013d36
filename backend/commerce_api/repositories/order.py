"""Order repository: atomic creation plus thin and full read shapes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import cast

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import raiseload, selectinload

from commerce_api.models.order import Order, OrderItem
from commerce_api.repositories.base import BaseRepository
from commerce_api.repositories.order_routines import (
    PG_INSUFFICIENT_STOCK_SQLSTATE,
    PG_NOT_FOUND_SQLSTATE,
    CreateOrderRoutine,
    OrderLine,
    routine_for_dialect,
    serialize_lines,
)
from commerce_api.services._shared.errors import ConflictError, NotFoundError, ServiceError

logger = logging.getLogger(__name__)


class OrderRepository(BaseRepository[Order]):
    """Persistence-only repository for :class:`Order`.

    Two read shapes exist on purpose: :meth:`list_by_user` returns orders
    without items, :meth:`get_with_items` returns one order with its items and
    their product names.
    """

    model = Order
    entity_name = "Order"

    def __init__(self, session=None, *, routine: CreateOrderRoutine | None = None, **kwargs):
        super().__init__(session, **kwargs)
        self._routine = routine

    def _sortable_fields(self):
        return {"id": Order.id, "total": Order.total, "created_at": Order.created_at}

    def _filterable_fields(self):
        return {"user_id": Order.user_id}

    # ------------------------------ Creation ---------------------------------

    def create_order_atomic(self, user_id: int, items: Iterable[OrderLine]) -> int:
        """Create an order and all of its items in one atomic step.

        The lines are serialized to JSON and handed to a single order routine
        running inside a SAVEPOINT of the current transaction. Any failure
        rolls the savepoint back, so neither the order nor any item remains.

        :param user_id: Owner of the new order.
        :type user_id: int
        :param items: Requested lines with their price snapshots.
        :type items: Iterable[OrderLine]
        :returns: Identifier of the created order.
        :rtype: int
        :raises NotFoundError: If the user or a product does not exist.
        :raises ConflictError: If a product has insufficient stock.
        :raises StorageUnavailableError: On connectivity failures.
        """
        payload = serialize_lines(items)
        routine = self._routine or routine_for_dialect(self.dialect_name)
        try:
            with self.session.begin_nested():
                order_id = routine(self.session, user_id, payload)
        except ServiceError:
            raise
        except SQLAlchemyError as exc:
            raise self._routine_error(exc) from exc
        logger.info("Order created", extra={"order_id": order_id, "user_id": user_id})
        return order_id

    def _routine_error(self, exc: SQLAlchemyError) -> ServiceError:
        orig = exc.orig if isinstance(exc, DBAPIError) else None
        sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if sqlstate == PG_NOT_FOUND_SQLSTATE:
            return NotFoundError("Product", "order items")
        if sqlstate == PG_INSUFFICIENT_STOCK_SQLSTATE:
            return ConflictError("Product", "insufficient stock")
        return cast(ServiceError, self._translate(exc))

    # ------------------------------- Reads -----------------------------------

    def get_with_items(self, order_id: int) -> Order | None:
        """Fetch one order with items and each item's product.

        :param order_id: Order identifier.
        :type order_id: int
        :returns: The order or ``None`` when absent.
        :rtype: Order | None
        """
        stmt = (
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items).joinedload(OrderItem.product))
        )
        return cast(Order | None, self.session.execute(stmt).scalars().first())

    def list_by_user(self, user_id: int) -> list[Order]:
        """Return a user's orders without their items (totals only)."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .options(raiseload(Order.items))
            .order_by(Order.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())
