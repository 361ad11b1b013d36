"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from commerce_api.core.database import install_sqlite_transaction_fixes

# Global naming convention for all constraints. Uniqueness violations surface
# these names in driver messages (see ``infra.db.error_classifier``).
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe). Objects stay readable after a unit of work
# commits and closes its session, hence ``expire_on_commit=False``.
db: SQLAlchemy = SQLAlchemy(
    session_options={"autoflush": False, "expire_on_commit": False},
    metadata=metadata,
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, and JWT extensions.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`commerce_api.models` package to ensure SQLAlchemy metadata is
        ready for migrations.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from commerce_api import models as _models  # noqa: F401

    with app.app_context():
        install_sqlite_transaction_fixes(db.engine)

    migrate.init_app(app, db)
    jwt.init_app(app)
