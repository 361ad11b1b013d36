"""Role model: named permission group assigned to every user."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from commerce_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

#: Role assigned at registration when the caller does not choose one.
DEFAULT_ROLE_NAME = "user"
ADMIN_ROLE_NAME = "Admin"


class Role(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Named role such as ``"user"`` or ``"Admin"``.

    Fields
    ------
    name : str
        Unique, case-sensitive role name embedded in access tokens.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    users: Mapped[list[User]] = relationship(back_populates="role")

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Role name is required.")
        return value.strip()
