"""Role repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from commerce_api.models.role import Role
from commerce_api.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Persistence-only repository for :class:`Role`."""

    model = Role
    entity_name = "Role"

    def _sortable_fields(self):
        return {"id": Role.id, "name": Role.name}

    def _filterable_fields(self):
        return {"name": Role.name}

    def _updatable_fields(self):
        return {"name"}

    def get_by_name(self, name: str) -> Role | None:
        """Fetch a role by its exact name.

        :param name: Role name (e.g. ``"user"`` or ``"Admin"``).
        :type name: str
        :returns: Role or ``None`` when absent.
        :rtype: Role | None
        """
        stmt = select(Role).where(Role.name == name.strip())
        return cast(Role | None, self.session.execute(stmt).scalars().first())
