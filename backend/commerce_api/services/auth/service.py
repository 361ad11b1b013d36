# commerce_api/services/auth/service.py
from __future__ import annotations

import base64
import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from commerce_api.models.role import DEFAULT_ROLE_NAME
from commerce_api.models.user import User
from commerce_api.services._shared.base import BaseService, UnitOfWorkFactory
from commerce_api.services._shared.errors import AuthenticationError
from commerce_api.services._shared.ports import PasswordHasher, TokenProvider
from commerce_api.services.auth.dto import AuthResult, AuthSettings, LoginIn, RefreshIn
from commerce_api.uow import UnitOfWork

logger = logging.getLogger(__name__)

#: Fixed lifetime of refresh tokens; only the access lifetime is configurable.
REFRESH_TOKEN_LIFETIME = timedelta(days=7)
REFRESH_TOKEN_BYTES = 64

INVALID_CREDENTIALS = "Invalid username or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_refresh_token() -> str:
    """Return an opaque refresh token: base64 of 64 random bytes."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class AuthService(BaseService):
    """
    Authentication lifecycle service (login / refresh / revoke).

    Access tokens are signed by the injected :class:`TokenProvider`. Refresh
    tokens are opaque random strings stored on the user row; a user holds at
    most one, and issuing a new one overwrites the previous value.

    Every operation runs in a single Unit of Work and reads the clock once.
    Tokens are returned only after ``save()`` succeeded, so a failed commit
    never hands out a token that is not durably recorded.

    Concurrency
    -----------
    Two concurrent refreshes presenting the same token both succeed and the
    last commit wins; the other caller's pair is silently stale.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        token_provider: TokenProvider,
        password_hasher: PasswordHasher,
        uow_factory: UnitOfWorkFactory | None = None,
        clock: Clock | None = None,
        default_role: str = DEFAULT_ROLE_NAME,
    ) -> None:
        """
        Initialize the service with its collaborators.

        :param settings: Signing key, issuer, audience and access lifetime.
        :param token_provider: Adapter minting signed access tokens.
        :param password_hasher: Salted one-way hash adapter.
        :param uow_factory: Unit of Work factory.
        :param clock: Source of the current UTC time.
        :param default_role: Role name used when a user's role cannot be resolved.
        """
        super().__init__(uow_factory=uow_factory)
        self.settings = settings
        self.tokens = token_provider
        self.hasher = password_hasher
        self.clock: Clock = clock or utc_now
        self.default_role = default_role
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> AuthResult:
        """
        Verify credentials and issue a fresh token pair.

        Unknown usernames and wrong passwords fail identically.

        :param dto: Login input.
        :returns: Access token, refresh token, username and role.
        :raises AuthenticationError: If credentials are invalid.
        :raises StorageUnavailableError: If the new refresh token cannot be saved.
        """
        now = self.clock()
        username = (dto.username or "").strip()
        with self.uow() as uow:
            user = uow.users.get_by_username(username) if username else None
            if user is None:
                # Same hashing cost as a real mismatch
                self.hasher.verify(self._dummy_password_hash(), dto.password or "")
                logger.warning("Login failed", extra={"username": username})
                raise AuthenticationError(INVALID_CREDENTIALS)
            if not self.hasher.verify(user.password_hash, dto.password or ""):
                logger.warning("Login failed", extra={"username": username})
                raise AuthenticationError(INVALID_CREDENTIALS)

            result = self._issue(uow, user, now)
            uow.save()

        logger.info("Login succeeded", extra={"user_id": user.id, "username": user.username})
        return result

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AuthResult:
        """
        Rotate a refresh token and emit a new token pair.

        The presented token is overwritten, so it never authenticates again.

        :param dto: Refresh input.
        :returns: New access token, new refresh token, username and role.
        :raises AuthenticationError: If the token is unknown or expired.
        """
        now = self.clock()
        token = (dto.refresh_token or "").strip()
        with self.uow() as uow:
            user = uow.users.get_by_refresh_token(token) if token else None
            if user is None or not self._is_unexpired(user, now):
                logger.warning("Refresh rejected")
                raise AuthenticationError(INVALID_REFRESH_TOKEN)

            result = self._issue(uow, user, now)
            uow.save()

        logger.info("Refresh token rotated", extra={"user_id": user.id, "username": user.username})
        return result

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, refresh_token: str) -> bool:
        """
        Forget a refresh token.

        Only the token string is required; expiry is irrelevant.

        :param refresh_token: Token to revoke.
        :returns: ``True`` when a user held the token, ``False`` otherwise.
        """
        token = (refresh_token or "").strip()
        with self.uow() as uow:
            user = uow.users.get_by_refresh_token(token) if token else None
            if user is None:
                logger.info("Revoke ignored: unknown refresh token")
                return False
            user.clear_refresh_token()
            uow.users.update(user)
            uow.save()

        logger.info("Refresh token revoked", extra={"user_id": user.id, "username": user.username})
        return True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue(self, uow: UnitOfWork, user: User, now: datetime) -> AuthResult:
        role = self._resolve_role(uow, user)
        access = self.tokens.create_access_token(
            identity=user.id,
            claims={"username": user.username, "role": role},
            issued_at=now,
            expires_at=now + timedelta(minutes=self.settings.access_token_minutes),
        )
        refresh = new_refresh_token()
        user.set_refresh_token(refresh, now + REFRESH_TOKEN_LIFETIME)
        uow.users.update(user)
        return AuthResult(
            access_token=access,
            refresh_token=refresh,
            username=user.username,
            role=role,
        )

    def _resolve_role(self, uow: UnitOfWork, user: User) -> str:
        loaded = uow.users.get_with_role(user.id)
        if loaded is None or loaded.role is None or not loaded.role.name:
            return self.default_role
        return loaded.role.name

    @staticmethod
    def _is_unexpired(user: User, now: datetime) -> bool:
        expires_at = user.refresh_token_expires_at
        return expires_at is not None and _as_utc(expires_at) > now

    def _dummy_password_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hasher.hash(secrets.token_urlsafe(16))
        return self._dummy_hash
