"""Map raw storage driver errors onto the service error taxonomy.

Uniqueness detection is pattern-based on each engine's error wording. The
pattern tables below MUST be kept in sync with the driver/server versions in
use: a reworded message silently degrades a ``Conflict`` into ``Unexpected``.
The tables are keyed by SQLAlchemy dialect name so a deployment can register
its own engine without touching callers.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from commerce_api.services._shared.errors import (
    ConflictError,
    ServiceError,
    StorageUnavailableError,
    UnexpectedError,
)


class StorageErrorKind(str, Enum):
    """Coarse classification of a storage failure."""

    CONFLICT = "conflict"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    UNEXPECTED = "unexpected"


#: Lower-cased message fragments identifying a uniqueness violation.
UNIQUE_VIOLATION_PATTERNS: dict[str, tuple[str, ...]] = {
    "postgresql": ("duplicate key value violates unique constraint",),
    "sqlite": ("unique constraint failed",),
    "mysql": ("duplicate entry",),
    "mariadb": ("duplicate entry",),
}

#: Lower-cased message fragments identifying a foreign-key violation, e.g.
#: deleting a product that order items still reference.
REFERENCE_VIOLATION_PATTERNS: dict[str, tuple[str, ...]] = {
    "postgresql": ("violates foreign key constraint",),
    "sqlite": ("foreign key constraint failed",),
    "mysql": ("a foreign key constraint fails",),
    "mariadb": ("a foreign key constraint fails",),
}

#: SQLSTATE codes where the driver exposes them.
UNIQUE_VIOLATION_SQLSTATES = frozenset({"23505"})
REFERENCE_VIOLATION_SQLSTATES = frozenset({"23503"})

StorageErrorClassifier = Callable[[BaseException], StorageErrorKind]


def _driver_message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig if orig is not None else exc).lower()


def _sqlstate(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None)
    # psycopg2 exposes ``pgcode``; psycopg 3 exposes ``sqlstate``
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _matches(exc: BaseException, patterns: Mapping[str, tuple[str, ...]]) -> bool:
    message = _driver_message(exc)
    return any(fragment in message for fragments in patterns.values() for fragment in fragments)


def is_unique_violation(
    exc: BaseException,
    *,
    patterns: Mapping[str, tuple[str, ...]] = UNIQUE_VIOLATION_PATTERNS,
) -> bool:
    """Return ``True`` when ``exc`` looks like a uniqueness violation.

    :param exc: Error raised by SQLAlchemy during flush/commit/execute.
    :type exc: BaseException
    :param patterns: Dialect name → message fragments table.
    :type patterns: Mapping[str, tuple[str, ...]]
    :returns: Whether any known engine wording (or SQLSTATE) matched.
    :rtype: bool
    """
    if _sqlstate(exc) in UNIQUE_VIOLATION_SQLSTATES:
        return True
    return _matches(exc, patterns)


def is_reference_violation(
    exc: BaseException,
    *,
    patterns: Mapping[str, tuple[str, ...]] = REFERENCE_VIOLATION_PATTERNS,
) -> bool:
    """Return ``True`` when ``exc`` looks like a foreign-key violation."""
    if _sqlstate(exc) in REFERENCE_VIOLATION_SQLSTATES:
        return True
    return _matches(exc, patterns)


def classify(exc: BaseException) -> StorageErrorKind:
    """Classify a raw storage error.

    :param exc: Error raised by the storage layer.
    :type exc: BaseException
    :returns: The coarse kind used to pick a service error.
    :rtype: StorageErrorKind
    """
    if isinstance(exc, IntegrityError) and (
        is_unique_violation(exc) or is_reference_violation(exc)
    ):
        return StorageErrorKind.CONFLICT
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)):
        return StorageErrorKind.STORAGE_UNAVAILABLE
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return StorageErrorKind.STORAGE_UNAVAILABLE
    return StorageErrorKind.UNEXPECTED


def to_service_error(
    exc: BaseException,
    *,
    entity: str = "Resource",
    classifier: StorageErrorClassifier = classify,
) -> ServiceError:
    """Translate ``exc`` into a service error without leaking driver text.

    The caller is expected to ``raise ... from exc`` so the original error is
    kept as ``__cause__`` for server-side logs only.

    :param exc: Error raised by the storage layer.
    :type exc: BaseException
    :param entity: Entity name used in the conflict message.
    :type entity: str
    :param classifier: Pluggable classification strategy.
    :type classifier: StorageErrorClassifier
    :returns: Service error instance ready to raise.
    :rtype: ServiceError
    """
    if isinstance(exc, ServiceError):
        return exc
    kind = classifier(exc)
    if kind is StorageErrorKind.CONFLICT:
        if is_reference_violation(exc):
            return ConflictError(entity, "is referenced by other records")
        return ConflictError(entity, "already exists")
    if kind is StorageErrorKind.STORAGE_UNAVAILABLE:
        return StorageUnavailableError()
    return UnexpectedError()


__all__ = [
    "StorageErrorClassifier",
    "StorageErrorKind",
    "UNIQUE_VIOLATION_PATTERNS",
    "classify",
    "is_reference_violation",
    "is_unique_violation",
    "to_service_error",
]
