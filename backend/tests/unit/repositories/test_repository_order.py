"""Tests for atomic order creation and the two order read shapes."""

from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, InvalidRequestError

from commerce_api.models import Order, OrderItem, Product
from commerce_api.repositories import OrderItemRepository, OrderRepository
from commerce_api.repositories.order_routines import (
    OrderLine,
    order_total,
    parse_lines,
    serialize_lines,
)
from commerce_api.services._shared.errors import ConflictError, NotFoundError, UnexpectedError
from tests.factories import OrderFactory, OrderItemFactory, ProductFactory, UserFactory


def _count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


def _stock(session, product_id: int) -> int:
    return session.execute(select(Product.stock).where(Product.id == product_id)).scalar_one()


class _DriverError(Exception):
    def __init__(self, message: str, pgcode: str) -> None:
        super().__init__(message)
        self.pgcode = pgcode


def _failing_routine(pgcode: str):
    def routine(session, user_id, items_json):
        raise DBAPIError("SELECT create_order(...)", {}, _DriverError("raised", pgcode))

    return routine


class TestOrderLines:
    def test_serialization_keeps_prices_exact(self) -> None:
        lines = [OrderLine(product_id=3, quantity=2, unit_price=Decimal("19.99"))]
        assert parse_lines(serialize_lines(lines)) == lines
        assert '"unit_price": "19.99"' in serialize_lines(lines)

    def test_total_sums_quantity_times_price(self) -> None:
        lines = [
            OrderLine(product_id=1, quantity=3, unit_price=Decimal("19.99")),
            OrderLine(product_id=2, quantity=1, unit_price=Decimal("0.05")),
        ]
        assert order_total(lines) == Decimal("60.02")


class TestCreateOrderAtomic:
    def test_creates_order_items_total_and_decrements_stock(self, session) -> None:
        """
        GIVEN a user and two products in stock
        WHEN an order for both is created
        THEN the order, its items and the total exist and stock is decremented
        """
        user = UserFactory()
        pen = ProductFactory(price=Decimal("2.50"), stock=10)
        book = ProductFactory(price=Decimal("12.00"), stock=1)

        order_id = OrderRepository(session).create_order_atomic(
            user.id,
            [
                OrderLine(product_id=pen.id, quantity=4, unit_price=Decimal("2.50")),
                OrderLine(product_id=book.id, quantity=1, unit_price=Decimal("12.00")),
            ],
        )
        session.expire_all()

        order = session.get(Order, order_id)
        assert order.user_id == user.id
        assert order.total == Decimal("22.00")
        assert [(i.product_id, i.quantity) for i in order.items] == [(pen.id, 4), (book.id, 1)]
        assert _stock(session, pen.id) == 6
        assert _stock(session, book.id) == 0

    def test_unit_price_is_a_snapshot(self, session) -> None:
        user = UserFactory()
        product = ProductFactory(price=Decimal("5.00"))
        order_id = OrderRepository(session).create_order_atomic(
            user.id, [OrderLine(product.id, 1, Decimal("5.00"))]
        )

        product.price = Decimal("7.00")
        session.flush()
        session.expire_all()

        assert session.get(Order, order_id).items[0].unit_price == Decimal("5.00")

    def test_missing_product_leaves_no_rows(self, session) -> None:
        user = UserFactory()
        product = ProductFactory(stock=5)

        with pytest.raises(NotFoundError) as exc_info:
            OrderRepository(session).create_order_atomic(
                user.id,
                [
                    OrderLine(product.id, 1, Decimal("10.00")),
                    OrderLine(999999, 1, Decimal("10.00")),
                ],
            )

        assert exc_info.value.entity == "Product"
        assert _count(session, Order) == 0
        assert _count(session, OrderItem) == 0
        assert _stock(session, product.id) == 5

    def test_unknown_user_is_not_found(self, session) -> None:
        product = ProductFactory()
        with pytest.raises(NotFoundError) as exc_info:
            OrderRepository(session).create_order_atomic(
                424242, [OrderLine(product.id, 1, Decimal("10.00"))]
            )
        assert exc_info.value.entity == "User"

    def test_insufficient_stock_is_conflict_and_nothing_changes(self, session) -> None:
        user = UserFactory()
        plenty = ProductFactory(stock=50)
        scarce = ProductFactory(stock=1)

        with pytest.raises(ConflictError):
            OrderRepository(session).create_order_atomic(
                user.id,
                [
                    OrderLine(plenty.id, 5, Decimal("10.00")),
                    OrderLine(scarce.id, 2, Decimal("10.00")),
                ],
            )

        assert _count(session, Order) == 0
        assert _stock(session, plenty.id) == 50
        assert _stock(session, scarce.id) == 1

    def test_repeated_product_lines_are_checked_together(self, session) -> None:
        user = UserFactory()
        product = ProductFactory(stock=5)

        with pytest.raises(ConflictError):
            OrderRepository(session).create_order_atomic(
                user.id,
                [
                    OrderLine(product.id, 3, Decimal("10.00")),
                    OrderLine(product.id, 3, Decimal("10.00")),
                ],
            )
        assert _stock(session, product.id) == 5

    @pytest.mark.parametrize(
        ("pgcode", "expected"),
        [
            ("P0002", NotFoundError),
            ("CS001", ConflictError),
            ("23514", UnexpectedError),
        ],
    )
    def test_server_routine_errors_are_mapped(self, session, pgcode, expected) -> None:
        user = UserFactory()
        repo = OrderRepository(session, routine=_failing_routine(pgcode))

        with pytest.raises(expected) as exc_info:
            repo.create_order_atomic(user.id, [OrderLine(1, 1, Decimal("1.00"))])

        assert isinstance(exc_info.value.__cause__, DBAPIError)


class TestReadShapes:
    def test_get_with_items_fetches_items_and_product_names(self, session) -> None:
        order = OrderFactory()
        OrderItemFactory(order=order, product=ProductFactory(name="Desk"), quantity=2)
        session.expire_all()

        loaded = OrderRepository(session).get_with_items(order.id)

        assert [(i.product_name, i.quantity) for i in loaded.items] == [("Desk", 2)]

    def test_get_with_items_returns_none_when_absent(self, session) -> None:
        assert OrderRepository(session).get_with_items(123456) is None

    def test_list_by_user_omits_items(self, session) -> None:
        """
        GIVEN a user with an order that has items
        WHEN their orders are listed
        THEN the totals are present and touching items raises
        """
        order = OrderFactory(total=Decimal("10.00"))
        OrderItemFactory(order=order)
        OrderFactory()  # someone else's order
        session.expire_all()

        orders = OrderRepository(session).list_by_user(order.user_id)

        assert [(o.id, o.total) for o in orders] == [(order.id, Decimal("10.00"))]
        with pytest.raises(InvalidRequestError):
            _ = orders[0].items

    def test_order_items_are_listed_with_products(self, session) -> None:
        order = OrderFactory()
        first = OrderItemFactory(order=order, product=ProductFactory(name="Chair"))
        second = OrderItemFactory(order=order, product=ProductFactory(name="Table"))
        session.expire_all()

        items = OrderItemRepository(session).list_by_order(order.id)

        assert [i.id for i in items] == [first.id, second.id]
        assert [i.product_name for i in items] == ["Chair", "Table"]
