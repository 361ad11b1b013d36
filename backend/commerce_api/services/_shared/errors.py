"""
Domain-level exceptions used within the service and persistence layers.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP, and raw storage driver errors only travel along as ``__cause__`` for
server-side diagnostics. Translation to RFC 7807 responses happens in
``commerce_api/core/errors.py``.

Kinds
-----
=========================  ==================================================
``ValidationError``        malformed or missing input (caller can fix it)
``AuthenticationError``    bad credentials or bad/expired/unknown token
``AuthorizationError``     authenticated but not allowed (e.g. foreign order)
``NotFoundError``          referenced entity is absent
``ConflictError``          uniqueness or business-rule collision
``StorageUnavailableError`` transaction could not be opened or committed
``UnexpectedError``        anything uncategorized
=========================  ==================================================
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - The API layer translates them to problem+json responses.
    """

    pass


# --------------------------------------------------------------------------- #
# Caller errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """
    Raised when input is malformed or missing.

    :param errors: Mapping of field name to one or more messages.
    :type errors: Mapping[str, Sequence[str]]
    """

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        self.errors: dict[str, list[str]] = {k: list(v) for k, v in errors.items()}
        super().__init__("One or more validation errors occurred")

    @classmethod
    def for_field(cls, field_name: str, message: str) -> ValidationError:
        """Build an error carrying a single field message."""
        return cls({field_name: [message]})


class AuthenticationError(ServiceError):
    """
    Raised when credentials or a refresh token cannot be accepted.

    The message is deliberately uniform: it never reveals whether the username
    exists, the password mismatched, or the token was unknown versus expired.
    """

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AuthorizationError(ServiceError):
    """Raised when an authenticated actor may not access a resource."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


@dataclass(slots=True, eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} with key '{self.key}' was not found"


@dataclass(slots=True, eq=False)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Product").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str = field(default="already exists")

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Infrastructure errors
# --------------------------------------------------------------------------- #


class StorageUnavailableError(ServiceError):
    """
    Raised when a transaction cannot be opened or committed.

    Fatal for the current operation; this layer never retries automatically.
    """

    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(message)


class UnexpectedError(ServiceError):
    """Raised for uncategorized failures; surfaced generically to clients."""

    def __init__(self, message: str = "Unexpected error") -> None:
        super().__init__(message)


class UnitOfWorkDisposedError(ServiceError):
    """Raised when a unit of work is used after commit, rollback or close."""

    def __init__(self, message: str = "Unit of work is no longer active") -> None:
        super().__init__(message)


__all__ = [
    "ServiceError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "StorageUnavailableError",
    "UnexpectedError",
    "UnitOfWorkDisposedError",
]
