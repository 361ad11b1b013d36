"""User repository for persistence and authentication lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select, text
from sqlalchemy.orm import contains_eager

from commerce_api.models.role import Role
from commerce_api.models.user import User
from commerce_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository only looks rows up and stores them. Password verification
    and token issuance belong to the authentication service.
    """

    model = User
    entity_name = "User"

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        """Expose sortable fields for safe public sorting."""
        return {
            "id": User.id,
            "username": User.username,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {"username": User.username, "role_id": User.role_id}

    def _updatable_fields(self):
        """Publicly allowed updatable fields (never the password hash)."""
        return {"username", "role_id"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username.

        :param username: Username; surrounding whitespace is ignored.
        :type username: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_with_role(self, user_id: int) -> User | None:
        """Fetch a user together with its role in a single round trip.

        :param user_id: User identifier.
        :type user_id: int
        :returns: User with ``role`` loaded, or ``None``.
        :rtype: User | None
        """
        stmt = (
            select(User)
            .join(User.role)
            .options(contains_eager(User.role))
            .where(User.id == user_id)
        )
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_refresh_token(self, token: str) -> User | None:
        """Fetch the user currently holding ``token`` as refresh token.

        :param token: Opaque refresh token.
        :type token: str
        :returns: Holder of the token or ``None``.
        :rtype: User | None
        """
        if not token:
            return None
        stmt = select(User).where(User.refresh_token == token)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def authenticate(self, username: str, password_hash: str) -> tuple[int, str] | None:
        """Match a username and stored credential hash in one server-side call.

        PostgreSQL delegates to the ``auth_user`` routine installed by the
        migrations; other engines run the equivalent join.

        :param username: Username to match.
        :type username: str
        :param password_hash: Credential hash compared for equality.
        :type password_hash: str
        :returns: ``(user_id, role_name)`` or ``None`` when nothing matched.
        :rtype: tuple[int, str] | None
        """
        if self.dialect_name == "postgresql":
            row = self.session.execute(
                text("SELECT user_id, role_name FROM auth_user(:username, :password_hash)"),
                {"username": username, "password_hash": password_hash},
            ).first()
        else:
            row = self.session.execute(
                select(User.id, Role.name)
                .join(Role, User.role_id == Role.id)
                .where(User.username == username, User.password_hash == password_hash)
            ).first()
        if row is None:
            return None
        return int(row[0]), str(row[1])
