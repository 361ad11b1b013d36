"""Engine-level tweaks applied when the database is bound.

SQLite's ``pysqlite`` driver opens transactions lazily and emits its own
``BEGIN``, which breaks SAVEPOINT handling and lets the first statements of a
unit of work run outside the transaction. The listeners below hand transaction
control back to SQLAlchemy and switch on foreign-key enforcement, which SQLite
leaves off by default.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.engine import Engine


def install_sqlite_transaction_fixes(engine: Engine) -> None:
    """Register the pysqlite transaction listeners on ``engine``.

    No-op for other dialects.

    :param engine: Engine created by Flask-SQLAlchemy.
    :type engine: :class:`sqlalchemy.engine.Engine`
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable the driver's implicit BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")
