"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from werkzeug.exceptions import HTTPException

from commerce_api.core.extensions import jwt
from commerce_api.core.logger import ensure_request_id
from commerce_api.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    StorageUnavailableError,
    ValidationError,
)

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """
    Return a Flask response with ``application/problem+json`` media type.

    :param problem: Problem details payload.
    :returns: Flask JSON Response with proper MIME type.
    :rtype: flask.Response
    """
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


def service_error_to_problem(err: ServiceError) -> dict[str, Any]:
    """
    Translate a service error into a problem payload.

    Only messages written for clients are exposed; storage and unexpected
    failures get a generic text.

    :param err: Error raised by the service layer.
    :returns: Problem details dictionary.
    """
    if isinstance(err, ValidationError):
        return _as_problem(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message=str(err),
            details={"errors": err.errors},
        )
    if isinstance(err, AuthenticationError):
        return _as_problem(status=HTTPStatus.UNAUTHORIZED, code="unauthorized", message=str(err))
    if isinstance(err, AuthorizationError):
        return _as_problem(status=HTTPStatus.FORBIDDEN, code="forbidden", message=str(err))
    if isinstance(err, NotFoundError):
        return _as_problem(status=HTTPStatus.NOT_FOUND, code="not_found", message=str(err))
    if isinstance(err, ConflictError):
        return _as_problem(status=HTTPStatus.CONFLICT, code="conflict", message=str(err))
    if isinstance(err, StorageUnavailableError):
        return _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
    return _as_problem(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        code="internal_server_error",
        message="Unexpected error",
    )


def _register_jwt_loaders() -> None:
    """Render Flask-JWT-Extended rejections as problem+json 401 responses."""

    def _unauthorized(message: str):
        problem = _as_problem(status=HTTPStatus.UNAUTHORIZED, code="unauthorized", message=message)
        log.warning("JWT rejected: request_id=%s", problem["request_id"])
        return _problem_response(problem), HTTPStatus.UNAUTHORIZED

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return _unauthorized("Missing access token")

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return _unauthorized("Invalid access token")

    @jwt.expired_token_loader
    def _expired_token(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _unauthorized("Access token has expired")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    _register_jwt_loaders()

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        problem = service_error_to_problem(err)
        status = int(problem["status"])
        if status >= 500:
            log.error(
                "ServiceError: code=%s status=%s request_id=%s",
                problem["code"],
                status,
                problem["request_id"],
                exc_info=err,
                extra={"error_kind": type(err).__name__},
            )
        else:
            log.warning(
                "ServiceError: code=%s status=%s request_id=%s",
                problem["code"],
                status,
                problem["request_id"],
                extra={"error_kind": type(err).__name__},
            )
        return _problem_response(problem), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem["request_id"],
        )
        return _problem_response(problem), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_schema_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        log.warning("Schema validation failed: request_id=%s", problem["request_id"])
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error(
            "Unhandled exception: request_id=%s",
            problem["request_id"],
            exc_info=True,
        )
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
