"""Unit tests for :class:`commerce_api.uow.SQLAlchemyUnitOfWork`."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError

from commerce_api.models import Role
from commerce_api.repositories import ProductRepository, UserRepository
from commerce_api.services._shared.errors import (
    ConflictError,
    StorageUnavailableError,
    UnitOfWorkDisposedError,
)
from commerce_api.uow import SQLAlchemyUnitOfWork, UnitOfWorkState
from tests.helpers.utils import not_raises


def _role_names(session) -> set[str]:
    session.expire_all()
    return set(session.execute(select(Role.name)).scalars())


def _fake_session(**side_effects) -> MagicMock:
    fake = MagicMock(name="Session")
    for method, effect in side_effects.items():
        getattr(fake, method).side_effect = effect
    return fake


class TestTransactionBoundaries:
    def test_save_makes_writes_visible(self, session) -> None:
        """
        GIVEN a unit of work that adds a role
        WHEN save() is called
        THEN the role is visible outside the unit of work
        """
        with SQLAlchemyUnitOfWork() as uow:
            uow.roles.add(Role(name="auditor"))
            assert uow.save() is True
            assert uow.state is UnitOfWorkState.COMMITTED

        assert "auditor" in _role_names(session)

    def test_leaving_block_without_save_discards_writes(self, session) -> None:
        """
        GIVEN a unit of work that adds a role
        WHEN the block exits without save()
        THEN nothing is persisted and the state is ROLLED_BACK
        """
        with SQLAlchemyUnitOfWork() as uow:
            uow.roles.add(Role(name="ghost"))

        assert uow.state is UnitOfWorkState.ROLLED_BACK
        assert "ghost" not in _role_names(session)

    def test_exception_inside_block_rolls_back(self, session) -> None:
        with pytest.raises(RuntimeError):
            with SQLAlchemyUnitOfWork() as uow:
                uow.roles.add(Role(name="boom"))
                raise RuntimeError("handler failed")

        assert "boom" not in _role_names(session)

    def test_save_is_idempotent_after_commit(self, session) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.roles.add(Role(name="twice"))
            assert uow.save() is True
            assert uow.save() is True

        assert "twice" in _role_names(session)

    def test_explicit_rollback_is_terminal(self, session) -> None:
        """
        GIVEN a unit of work rolled back explicitly
        WHEN repositories or save() are used afterwards
        THEN UnitOfWorkDisposedError is raised
        """
        uow = SQLAlchemyUnitOfWork()
        uow.roles.add(Role(name="discarded"))
        uow.rollback()

        with pytest.raises(UnitOfWorkDisposedError):
            uow.save()
        with pytest.raises(UnitOfWorkDisposedError):
            _ = uow.users
        uow.close()

        assert "discarded" not in _role_names(session)

    def test_close_is_idempotent(self, session) -> None:
        uow = SQLAlchemyUnitOfWork()
        uow.close()
        with not_raises(Exception):
            uow.close()
        assert uow.state is UnitOfWorkState.ROLLED_BACK


class TestRepositories:
    def test_repositories_are_cached_and_share_the_session(self, session) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users is uow.users
            assert isinstance(uow.users, UserRepository)
            assert isinstance(uow.products, ProductRepository)
            assert uow.users.session is uow.session
            assert uow.orders.session is uow.products.session

    def test_writes_through_different_repositories_commit_together(self, session) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.roles.add(Role(name="first"))
            uow.roles.add(Role(name="second"))
            uow.save()

        assert {"first", "second"} <= _role_names(session)


class TestFailures:
    def test_open_failure_maps_to_storage_unavailable(self) -> None:
        """
        GIVEN a session whose connection cannot be acquired
        WHEN the unit of work is constructed
        THEN StorageUnavailableError is raised and the session is closed
        """
        fake = _fake_session(connection=OperationalError("BEGIN", {}, Exception("down")))

        with pytest.raises(StorageUnavailableError) as exc_info:
            SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        assert isinstance(exc_info.value.__cause__, OperationalError)
        fake.close.assert_called_once()

    def test_commit_failure_rolls_back_and_reports_unavailable(self) -> None:
        original = OperationalError("COMMIT", {}, Exception("connection reset"))
        fake = _fake_session(commit=original)
        uow = SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        with pytest.raises(StorageUnavailableError) as exc_info:
            uow.save()

        assert exc_info.value.__cause__ is original
        assert uow.state is UnitOfWorkState.ROLLED_BACK
        fake.rollback.assert_called_once()

    def test_commit_uniqueness_violation_reports_conflict(self) -> None:
        original = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: products.sku")
        )
        fake = _fake_session(commit=original)
        uow = SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        with pytest.raises(ConflictError) as exc_info:
            uow.save()

        assert exc_info.value.__cause__ is original

    def test_unclassified_commit_error_still_reports_unavailable(self) -> None:
        original = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed"))
        fake = _fake_session(commit=original)
        uow = SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        with pytest.raises(StorageUnavailableError):
            uow.save()

    def test_failed_rollback_after_commit_keeps_commit_error(self, caplog) -> None:
        """
        GIVEN a commit that fails and a rollback that fails too
        WHEN save() is called
        THEN the commit error is surfaced and the rollback failure is logged
        """
        original = OperationalError("COMMIT", {}, Exception("gone"))
        fake = _fake_session(
            commit=original,
            rollback=OperationalError("ROLLBACK", {}, Exception("still gone")),
        )
        uow = SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        with caplog.at_level(logging.ERROR, logger="commerce_api.uow.sqlalchemy_uow"):
            with pytest.raises(StorageUnavailableError) as exc_info:
                uow.save()

        assert exc_info.value.__cause__ is original
        assert any("Rollback after failed commit" in r.getMessage() for r in caplog.records)

    def test_failed_disposal_rollback_keeps_block_error(self, caplog) -> None:
        """
        GIVEN a block that raises and a rollback that fails on disposal
        WHEN the with-block exits
        THEN the block's own error propagates and the rollback failure is logged
        """
        fake = _fake_session(
            rollback=OperationalError("ROLLBACK", {}, Exception("server closed the connection")),
        )

        with caplog.at_level(logging.ERROR, logger="commerce_api.uow.sqlalchemy_uow"):
            with pytest.raises(ValueError, match="handler failed"):
                with SQLAlchemyUnitOfWork(session_factory=lambda: fake) as uow:
                    raise ValueError("handler failed")

        assert uow.state is UnitOfWorkState.ROLLED_BACK
        fake.close.assert_called_once()
        assert any(r.getMessage() == "Rollback failed" for r in caplog.records)

    def test_failed_disposal_rollback_without_block_error_is_typed(self) -> None:
        original = OperationalError("ROLLBACK", {}, Exception("server closed the connection"))
        fake = _fake_session(rollback=original)

        with pytest.raises(StorageUnavailableError) as exc_info:
            with SQLAlchemyUnitOfWork(session_factory=lambda: fake) as uow:
                pass

        assert exc_info.value.__cause__ is original
        assert uow.state is UnitOfWorkState.ROLLED_BACK
        fake.close.assert_called_once()

    def test_failed_explicit_rollback_is_still_terminal(self) -> None:
        fake = _fake_session(rollback=OperationalError("ROLLBACK", {}, Exception("gone")))
        uow = SQLAlchemyUnitOfWork(session_factory=lambda: fake)

        with pytest.raises(StorageUnavailableError):
            uow.rollback()

        assert uow.state is UnitOfWorkState.ROLLED_BACK
        with not_raises(Exception):
            uow.close()
        fake.rollback.assert_called_once()

    def test_close_after_commit_does_not_roll_back(self) -> None:
        fake = _fake_session()
        with SQLAlchemyUnitOfWork(session_factory=lambda: fake) as uow:
            uow.save()

        fake.commit.assert_called_once()
        fake.rollback.assert_not_called()
        fake.close.assert_called_once()
