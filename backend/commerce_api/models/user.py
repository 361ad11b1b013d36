"""User model: login identity plus the single active refresh token."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from commerce_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .order import Order
    from .role import Role


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    username : str
        Unique login name (trimmed, non-empty).
    password_hash : str
        Salted one-way credential produced by the password hasher. Never
        serialized or logged.
    role_id : int
        Required reference to :class:`Role`.
    refresh_token : str | None
        Opaque refresh token currently issued to the user. Issuing a new one
        overwrites the previous value, so at most one is active.
    refresh_token_expires_at : datetime | None
        Expiry of ``refresh_token``; both are cleared on revocation.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )
    refresh_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    refresh_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    role: Mapped[Role] = relationship(back_populates="users")
    orders: Mapped[list[Order]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("refresh_token", name="uq_users_refresh_token"),
        Index("ix_users_role_id", "role_id"),
    )

    def __repr__(self) -> str:
        # Keep credentials out of debug output
        return f"<User id={self.id} username={self.username!r}>"

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate username.

        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str):
            raise ValueError("Username is required.")
        v = value.strip()
        if not v:
            raise ValueError("Username is required.")
        return v

    def set_refresh_token(self, token: str, expires_at: datetime) -> None:
        """Replace the active refresh token (rotation overwrites, never extends)."""
        self.refresh_token = token
        self.refresh_token_expires_at = expires_at

    def clear_refresh_token(self) -> None:
        """Forget the active refresh token and its expiry."""
        self.refresh_token = None
        self.refresh_token_expires_at = None
