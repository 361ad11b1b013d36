"""Factory Boy definitions for :class:`commerce_api.models.role.Role`."""

from __future__ import annotations

import factory

from commerce_api.models.role import ADMIN_ROLE_NAME, DEFAULT_ROLE_NAME, Role
from tests.factories import BaseFactory


class RoleFactory(BaseFactory):
    """Build (or reuse) a role by name; names are unique."""

    class Meta:
        model = Role
        sqlalchemy_get_or_create = ("name",)

    id = None
    name = DEFAULT_ROLE_NAME


class AdminRoleFactory(RoleFactory):
    name = ADMIN_ROLE_NAME
