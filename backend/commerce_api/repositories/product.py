"""Product repository with catalogue filtering."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from commerce_api.models.product import Product
from commerce_api.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Persistence-only repository for :class:`Product`."""

    model = Product
    entity_name = "Product"

    def _sortable_fields(self):
        return {
            "id": Product.id,
            "name": Product.name,
            "price": Product.price,
            "stock": Product.stock,
            "created_at": Product.created_at,
        }

    def _filterable_fields(self):
        return {"category": Product.category, "sku": Product.sku}

    def _updatable_fields(self):
        return {"name", "sku", "price", "stock", "category"}

    def list_filtered(
        self,
        category: str | None = None,
        name: str | None = None,
    ) -> list[Product]:
        """List products matching every supplied criterion.

        Both criteria are optional and combine with AND. ``category`` must match
        exactly; ``name`` matches as a case-insensitive substring.

        :param category: Exact category, or ``None`` for any.
        :type category: str | None
        :param name: Name fragment, or ``None`` for any.
        :type name: str | None
        :returns: Matching products ordered by id.
        :rtype: list[Product]
        """
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        if name:
            # Renders as lower() LIKE lower() with % and _ escaped
            stmt = stmt.where(Product.name.icontains(name, autoescape=True))
        stmt = stmt.order_by(Product.id.asc())
        return list(self.session.execute(stmt).scalars().all())

    def get_by_sku(self, sku: str) -> Product | None:
        """Fetch a product by its stock-keeping unit."""
        stmt = select(Product).where(Product.sku == sku.strip())
        return cast(Product | None, self.session.execute(stmt).scalars().first())
