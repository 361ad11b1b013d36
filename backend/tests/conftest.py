"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside one outer transaction on a shared in-memory SQLite
connection. The fixture session and every unit of work join that transaction
through their own SAVEPOINTs, so units of work can commit and roll back for
real while nothing leaks between cases.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
from sqlalchemy.orm import scoped_session, sessionmaker

from commerce_api.core.config import TestingConfig
from commerce_api.core.extensions import db as _db
from commerce_api.factory import create_app
from commerce_api.infra.security import WerkzeugPasswordHasher
from commerce_api.services._shared.ports import StubTokenProvider
from commerce_api.services.auth import AuthService, AuthSettings

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    The application context stays pushed for the whole session so request
    handlers in API tests share it.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a per-test transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection. ``db.session`` is
        swapped for it, so :class:`~commerce_api.uow.SQLAlchemyUnitOfWork`
        builds its sessions from the same factory and joins the same
        transaction.

    Notes
    -----
    The fixture session opens its SAVEPOINT eagerly. Units of work open theirs
    later, which keeps the savepoints properly nested when they are released.
    """
    top_trans = connection.begin()

    factory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
        expire_on_commit=False,
    )
    scoped = scoped_session(factory)
    scoped.connection()

    original_session = db.session
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def password_hasher():
    return WerkzeugPasswordHasher(TestingConfig.PASSWORD_HASH_METHOD)


@pytest.fixture()
def auth_settings():
    return AuthSettings(
        signing_key=TestingConfig.JWT_SECRET_KEY,
        issuer=TestingConfig.JWT_ISSUER,
        audience=TestingConfig.JWT_AUDIENCE,
        access_token_minutes=15,
    )


class MutableClock:
    """Controllable clock; tests move ``now`` forward explicitly."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock():
    return MutableClock(FIXED_NOW)


@pytest.fixture()
def auth_service(auth_settings, password_hasher, clock):
    """AuthService wired to a deterministic token provider and clock."""
    return AuthService(
        settings=auth_settings,
        token_provider=StubTokenProvider(),
        password_hasher=password_hasher,
        clock=clock,
    )


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- API fixtures ----------------------------------------------------------------
@pytest.fixture()
def user(session):
    """Persisted user with the default role and ``DEFAULT_PASSWORD``."""
    from tests.factories import UserFactory

    return UserFactory()


@pytest.fixture()
def admin(session):
    from tests.factories import AdminRoleFactory, UserFactory

    return UserFactory(role=AdminRoleFactory())


@pytest.fixture()
def auth_header(user):
    """Bearer headers for :func:`user`."""
    from tests.helpers.auth import issue_token
    from tests.helpers.http import json_headers

    return json_headers(issue_token(user))


@pytest.fixture()
def admin_header(admin):
    from tests.helpers.auth import issue_token
    from tests.helpers.http import json_headers

    return json_headers(issue_token(admin))
