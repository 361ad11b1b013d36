"""Order item repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from commerce_api.models.order import OrderItem
from commerce_api.repositories.base import BaseRepository


class OrderItemRepository(BaseRepository[OrderItem]):
    """Persistence-only repository for :class:`OrderItem`."""

    model = OrderItem
    entity_name = "OrderItem"

    def _default_eagerload(self, stmt):
        return stmt.options(joinedload(OrderItem.product))

    def list_by_order(self, order_id: int) -> list[OrderItem]:
        """Return the items of one order, each with its product loaded.

        :param order_id: Owning order identifier.
        :type order_id: int
        :returns: Items ordered by id; empty when the order has none.
        :rtype: list[OrderItem]
        """
        stmt = self._default_eagerload(
            select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())
