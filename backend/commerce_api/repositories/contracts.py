"""
Capability contracts implemented by the SQLAlchemy repositories.

Services type their dependencies against these protocols rather than the
concrete classes, so tests can hand in fakes.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

from commerce_api.models.order import Order, OrderItem
from commerce_api.models.product import Product
from commerce_api.models.role import Role
from commerce_api.models.user import User
from commerce_api.repositories.order_routines import OrderLine

E = TypeVar("E")


class CrudRepository(Protocol[E]):
    """Generic persistence surface shared by every repository."""

    def get_all(self) -> list[E]: ...
    def get_by_id(self, entity_id: int) -> E | None: ...
    def add(self, instance: E) -> int: ...
    def update(self, instance: E) -> None: ...
    def delete_by_id(self, entity_id: int) -> bool: ...


class ProductQueries(CrudRepository[Product], Protocol):
    def list_filtered(
        self, category: str | None = None, name: str | None = None
    ) -> list[Product]: ...
    def get_by_sku(self, sku: str) -> Product | None: ...


class OrderQueries(CrudRepository[Order], Protocol):
    def create_order_atomic(self, user_id: int, items: Iterable[OrderLine]) -> int: ...
    def get_with_items(self, order_id: int) -> Order | None: ...
    def list_by_user(self, user_id: int) -> list[Order]: ...


class OrderItemQueries(CrudRepository[OrderItem], Protocol):
    def list_by_order(self, order_id: int) -> list[OrderItem]: ...


class UserQueries(CrudRepository[User], Protocol):
    def get_by_username(self, username: str) -> User | None: ...
    def get_with_role(self, user_id: int) -> User | None: ...
    def get_by_refresh_token(self, token: str) -> User | None: ...
    def authenticate(self, username: str, password_hash: str) -> tuple[int, str] | None: ...


class RoleQueries(CrudRepository[Role], Protocol):
    def get_by_name(self, name: str) -> Role | None: ...


__all__ = [
    "CrudRepository",
    "OrderItemQueries",
    "OrderQueries",
    "ProductQueries",
    "RoleQueries",
    "UserQueries",
]
