# commerce_api/services/orders/service.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from commerce_api.models.base import quantize_money
from commerce_api.repositories.order_routines import OrderLine
from commerce_api.services._shared.base import BaseService
from commerce_api.services._shared.errors import NotFoundError
from commerce_api.services.orders.dto import OrderItemIn, OrderOut, OrderSummaryOut

logger = logging.getLogger(__name__)


class OrderService(BaseService):
    """
    Order placement and retrieval for the authenticated user.

    Creation goes through the repository's single atomic routine: stock
    checks, stock decrements, the total and every row land together or not
    at all.
    """

    def create(self, user_id: int, items: Sequence[OrderItemIn]) -> OrderOut:
        """
        Place an order for ``user_id``.

        :param user_id: Authenticated buyer.
        :param items: Requested lines (at least one).
        :returns: The created order with its items.
        :raises ValidationError: On empty or malformed lines.
        :raises NotFoundError: If the user or a product does not exist.
        :raises ConflictError: If stock is insufficient.
        """
        lines = self._validated_lines(items)
        with self.uow() as uow:
            if uow.users.get_by_id(user_id) is None:
                raise NotFoundError("User", user_id)
            order_id = uow.orders.create_order_atomic(user_id, lines)
            uow.save()

        # Read back in a fresh unit of work so stock/total reflect committed state
        with self.uow() as uow:
            order = uow.orders.get_with_items(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            return OrderOut.from_model(order)

    def get(self, order_id: int, *, actor_id: int) -> OrderOut:
        """
        Fetch one order with its items.

        :raises NotFoundError: If the order does not exist.
        :raises AuthorizationError: If ``actor_id`` does not own it.
        """
        with self.uow() as uow:
            order = uow.orders.get_with_items(order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            self.ensure_owner(actor_id, order.user_id, msg="You can only access your own orders.")
            return OrderOut.from_model(order)

    def list_for_user(self, user_id: int) -> list[OrderSummaryOut]:
        """List a user's orders without items."""
        with self.uow() as uow:
            return [OrderSummaryOut.from_model(o) for o in uow.orders.list_by_user(user_id)]

    # ------------------------------------------------------------------ #

    def _validated_lines(self, items: Sequence[OrderItemIn]) -> list[OrderLine]:
        if not items:
            self.raise_if_errors({"items": ["At least one item is required."]})

        errors: dict[str, list[str]] = {}
        lines: list[OrderLine] = []
        for index, item in enumerate(items):
            messages: list[str] = []
            if item.product_id is None or int(item.product_id) <= 0:
                messages.append("product_id must be a positive integer.")
            if item.quantity is None or int(item.quantity) <= 0:
                messages.append("quantity must be greater than zero.")
            try:
                price = quantize_money(item.unit_price)
            except (InvalidOperation, TypeError):
                price = Decimal("0")
            if price <= 0:
                messages.append("unit_price must be greater than zero.")
            if messages:
                errors[f"items[{index}]"] = messages
                continue
            lines.append(
                OrderLine(
                    product_id=int(item.product_id),
                    quantity=int(item.quantity),
                    unit_price=price,
                )
            )
        self.raise_if_errors(errors)
        return lines
