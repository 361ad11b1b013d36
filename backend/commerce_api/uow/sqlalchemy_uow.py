"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commerce_api.core.extensions import db
from commerce_api.infra.db.error_classifier import StorageErrorClassifier, classify, to_service_error
from commerce_api.repositories import (
    OrderItemRepository,
    OrderRepository,
    ProductRepository,
    RoleRepository,
    UserRepository,
)
from commerce_api.services._shared.errors import (
    ConflictError,
    StorageUnavailableError,
    UnitOfWorkDisposedError,
)
from commerce_api.uow.base import UnitOfWork, UnitOfWorkState

logger = logging.getLogger(__name__)


def _default_session_factory() -> Session:
    return db.session.session_factory()


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy-backed UoW owning a dedicated session.

    The transaction begins on construction and stays open until :meth:`save`,
    :meth:`rollback` or :meth:`close`. Nothing is committed implicitly: leaving
    a ``with`` block without calling :meth:`save` rolls every write back.

    Repositories are built lazily, bound to this session and cached, so the
    same instance is returned on repeated access.

    :param session_factory: Callable returning a new :class:`Session`. Defaults
        to the Flask-SQLAlchemy session factory.
    :param classifier: Storage error classifier used to translate commit
        failures.
    :raises StorageUnavailableError: If the transaction cannot be opened.
    """

    _REPOSITORIES: dict[str, type[Any]] = {
        "users": UserRepository,
        "roles": RoleRepository,
        "products": ProductRepository,
        "orders": OrderRepository,
        "order_items": OrderItemRepository,
    }

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        *,
        classifier: StorageErrorClassifier | None = None,
    ) -> None:
        self._classify = classifier or classify
        self._repositories: dict[str, Any] = {}
        self._state = UnitOfWorkState.OPEN
        self._closed = False
        self.session: Session = (session_factory or _default_session_factory)()
        try:
            # Acquire the connection now so the transaction is really open
            self.session.connection()
        except SQLAlchemyError as exc:
            self.session.close()
            self._closed = True
            self._state = UnitOfWorkState.ROLLED_BACK
            logger.error("Could not open transaction", extra={"error_kind": "storage_unavailable"})
            raise StorageUnavailableError() from exc

    # ----------------------------- State ------------------------------------

    @property
    def state(self) -> UnitOfWorkState:
        return self._state

    def _ensure_open(self) -> None:
        if self._state is not UnitOfWorkState.OPEN:
            raise UnitOfWorkDisposedError()

    # --------------------------- Repositories -------------------------------

    def _repository(self, name: str) -> Any:
        self._ensure_open()
        repo = self._repositories.get(name)
        if repo is None:
            repo = self._REPOSITORIES[name](self.session, classifier=self._classify)
            self._repositories[name] = repo
        return repo

    @property
    def users(self) -> UserRepository:
        return self._repository("users")

    @property
    def roles(self) -> RoleRepository:
        return self._repository("roles")

    @property
    def products(self) -> ProductRepository:
        return self._repository("products")

    @property
    def orders(self) -> OrderRepository:
        return self._repository("orders")

    @property
    def order_items(self) -> OrderItemRepository:
        return self._repository("order_items")

    # --------------------------- Transaction --------------------------------

    def save(self) -> bool:
        """Commit the transaction exactly once.

        :returns: ``True`` once the work is durable. Calling again after a
            successful commit returns ``True`` without touching the database.
        :raises ConflictError: If the commit hit a uniqueness violation.
        :raises StorageUnavailableError: If the commit failed otherwise.
        :raises UnitOfWorkDisposedError: If the work was already rolled back.
        """
        if self._state is UnitOfWorkState.COMMITTED:
            return True
        self._ensure_open()
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self._rollback_after_failed_commit()
            self._state = UnitOfWorkState.ROLLED_BACK
            error = to_service_error(exc, classifier=self._classify)
            if not isinstance(error, ConflictError):
                error = StorageUnavailableError()
            logger.warning(
                "Commit failed",
                extra={"error_kind": type(error).__name__},
            )
            raise error from exc
        self._state = UnitOfWorkState.COMMITTED
        return True

    def _rollback_after_failed_commit(self) -> None:
        try:
            self.session.rollback()
        except SQLAlchemyError:
            # The commit error is what the caller must see
            logger.error("Rollback after failed commit also failed", exc_info=True)

    def rollback(self) -> None:
        """Discard every pending write; the unit of work becomes terminal.

        :raises StorageUnavailableError: If the database rejected the rollback.
            The unit of work is terminal either way.
        """
        if self._state is not UnitOfWorkState.OPEN:
            return
        try:
            self.session.rollback()
        except SQLAlchemyError as exc:
            logger.error(
                "Rollback failed",
                exc_info=True,
                extra={"error_kind": "storage_unavailable"},
            )
            raise StorageUnavailableError() from exc
        finally:
            self._state = UnitOfWorkState.ROLLED_BACK

    def close(self) -> None:
        """Dispose the unit of work, rolling back anything not saved.

        Safe to call more than once.
        """
        if self._closed:
            return
        try:
            if self._state is UnitOfWorkState.OPEN:
                self.rollback()
        finally:
            self._closed = True
            self.session.close()

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except StorageUnavailableError:
            # An error raised inside the block wins over a failed disposal
            if exc is None:
                raise
