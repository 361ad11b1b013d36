"""Unit of Work abstractions and the SQLAlchemy implementation.

Services depend on :class:`UnitOfWork`; the application wires in
:class:`SQLAlchemyUnitOfWork`.
"""

from .base import UnitOfWork, UnitOfWorkState
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "UnitOfWorkState",
    "SQLAlchemyUnitOfWork",
]
