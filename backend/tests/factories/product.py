"""Factory Boy definition for :class:`commerce_api.models.product.Product`."""

from __future__ import annotations

from decimal import Decimal

import factory

from commerce_api.models.product import Product
from tests.factories import BaseFactory


class ProductFactory(BaseFactory):
    class Meta:
        model = Product

    id = None
    name = factory.Sequence(lambda n: f"Product {n}")
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    price = Decimal("10.00")
    stock = 10
    category = "books"
