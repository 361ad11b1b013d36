"""Tests for storage error classification."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, ProgrammingError

from commerce_api.infra.db.error_classifier import (
    StorageErrorKind,
    classify,
    is_unique_violation,
    to_service_error,
)
from commerce_api.services._shared.errors import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    UnexpectedError,
)


class _PgError(Exception):
    def __init__(self, message: str, pgcode: str | None = None) -> None:
        super().__init__(message)
        self.pgcode = pgcode


def _integrity(message: str, pgcode: str | None = None) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, _PgError(message, pgcode))


@pytest.mark.parametrize(
    "message",
    [
        "UNIQUE constraint failed: users.username",
        'duplicate key value violates unique constraint "uq_users_username"',
        "Duplicate entry 'bob' for key 'uq_users_username'",
    ],
)
def test_unique_violation_wording_per_engine(message) -> None:
    assert classify(_integrity(message)) is StorageErrorKind.CONFLICT


def test_unique_violation_by_sqlstate() -> None:
    assert is_unique_violation(_integrity("reworded by a newer server", pgcode="23505"))


def test_reference_violation_is_conflict_with_its_own_detail() -> None:
    error = to_service_error(_integrity("FOREIGN KEY constraint failed"), entity="Product")
    assert isinstance(error, ConflictError)
    assert error.detail == "is referenced by other records"


def test_other_integrity_errors_are_unexpected() -> None:
    assert classify(_integrity("NOT NULL constraint failed: products.name")) is (
        StorageErrorKind.UNEXPECTED
    )


def test_operational_errors_mean_storage_unavailable() -> None:
    exc = OperationalError("SELECT 1", {}, _PgError("could not connect to server"))
    assert isinstance(to_service_error(exc), StorageUnavailableError)


def test_invalidated_connection_means_storage_unavailable() -> None:
    exc = DBAPIError("SELECT 1", {}, _PgError("server closed"), connection_invalidated=True)
    assert classify(exc) is StorageErrorKind.STORAGE_UNAVAILABLE


def test_unknown_errors_never_leak_driver_text() -> None:
    error = to_service_error(ProgrammingError("SELECT", {}, _PgError("syntax error at secret")))
    assert isinstance(error, UnexpectedError)
    assert "secret" not in str(error)


def test_service_errors_pass_through_unchanged() -> None:
    original = NotFoundError("Product", 1)
    assert to_service_error(original) is original


def test_custom_classifier_is_honoured() -> None:
    error = to_service_error(
        _integrity("anything"),
        entity="Order",
        classifier=lambda exc: StorageErrorKind.CONFLICT,
    )
    assert isinstance(error, ConflictError)
    assert error.entity == "Order"
