"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from commerce_api.repositories.contracts import (
    OrderItemQueries,
    OrderQueries,
    ProductQueries,
    RoleQueries,
    UserQueries,
)


class UnitOfWorkState(str, Enum):
    """Lifecycle of a unit of work. ``COMMITTED`` and ``ROLLED_BACK`` are terminal."""

    OPEN = "open"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class UnitOfWork(ABC):
    """
    Coordinates one database transaction for a use-case.

    Responsibilities:
    - Provide repositories bound to the same session/transaction.
    - Commit only when :meth:`save` is called explicitly.
    - Roll back whatever was not saved when disposed.
    """

    @property
    @abstractmethod
    def state(self) -> UnitOfWorkState: ...

    @property
    @abstractmethod
    def users(self) -> UserQueries: ...
    @property
    @abstractmethod
    def roles(self) -> RoleQueries: ...
    @property
    @abstractmethod
    def products(self) -> ProductQueries: ...
    @property
    @abstractmethod
    def orders(self) -> OrderQueries: ...
    @property
    @abstractmethod
    def order_items(self) -> OrderItemQueries: ...

    @abstractmethod
    def save(self) -> bool: ...
    @abstractmethod
    def rollback(self) -> None: ...
    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
