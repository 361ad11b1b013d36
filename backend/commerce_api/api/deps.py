"""Shared API helpers for authentication, service wiring and responses."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from commerce_api.infra.jwt import JWTTokenProvider
from commerce_api.infra.security import WerkzeugPasswordHasher
from commerce_api.services._shared.errors import AuthenticationError, AuthorizationError
from commerce_api.services.auth import AuthService, AuthSettings
from commerce_api.services.orders import OrderService
from commerce_api.services.products import ProductService
from commerce_api.services.users import UserService

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SETTINGS_KEY = "commerce_api.auth_settings"


# ------------------------------ Service wiring ------------------------------


def auth_settings() -> AuthSettings:
    """Return the :class:`AuthSettings` built once by the app factory."""

    return cast(AuthSettings, current_app.extensions[AUTH_SETTINGS_KEY])


def password_hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(current_app.config.get("PASSWORD_HASH_METHOD"))


def auth_service() -> AuthService:
    settings = auth_settings()
    return AuthService(
        settings=settings,
        token_provider=JWTTokenProvider(settings),
        password_hasher=password_hasher(),
        default_role=current_app.config.get("DEFAULT_ROLE_NAME", "user"),
    )


def user_service() -> UserService:
    return UserService(
        password_hasher=password_hasher(),
        default_role=current_app.config.get("DEFAULT_ROLE_NAME", "user"),
    )


def product_service() -> ProductService:
    return ProductService()


def order_service() -> OrderService:
    return OrderService()


# ------------------------------ Authentication ------------------------------


def current_user_id() -> int:
    """Return the authenticated user id from the verified access token."""

    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid user authentication") from None


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(required: str) -> Callable[[F], F]:
    """Ensure the verified JWT carries ``required`` as its ``role`` claim."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            verify_jwt_in_request(optional=False)
            claims = get_jwt() or {}
            if claims.get("role") != required:
                raise AuthorizationError("Insufficient role")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


# -------------------------------- Responses ---------------------------------


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
