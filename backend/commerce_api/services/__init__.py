"""Service layer.

Use-case services live in sub-packages (``auth``, ``users``, ``products``,
``orders``) and are imported from there. This package only re-exports the
framework-agnostic error taxonomy so callers can write
``from commerce_api.services import NotFoundError``.
"""

from commerce_api.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StorageUnavailableError,
    UnexpectedError,
    UnitOfWorkDisposedError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "ServiceError",
    "StorageUnavailableError",
    "UnexpectedError",
    "UnitOfWorkDisposedError",
    "ValidationError",
]
