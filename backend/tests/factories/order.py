"""Factory Boy definitions for orders and their items."""

from __future__ import annotations

from decimal import Decimal

import factory

from commerce_api.models.order import Order, OrderItem
from tests.factories import BaseFactory
from tests.factories.product import ProductFactory
from tests.factories.user import UserFactory


class OrderFactory(BaseFactory):
    """Order row without items; ``total`` is whatever the test sets."""

    class Meta:
        model = Order

    id = None
    user = factory.SubFactory(UserFactory)
    total = Decimal("0.00")


class OrderItemFactory(BaseFactory):
    class Meta:
        model = OrderItem

    id = None
    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1
    unit_price = factory.LazyAttribute(lambda o: o.product.price)
