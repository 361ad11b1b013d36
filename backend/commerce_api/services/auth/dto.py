# commerce_api/services/auth/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from commerce_api.services._shared.errors import ValidationError

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Login name.
    :type username: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Opaque refresh token previously issued.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthResult:
    """
    Output DTO returned by login and refresh.

    :param access_token: Signed access token.
    :type access_token: str
    :param refresh_token: Opaque refresh token (base64 of 64 random bytes).
    :type refresh_token: str
    :param username: Authenticated username.
    :type username: str
    :param role: Role name embedded in the access token.
    :type role: str
    """

    access_token: str
    refresh_token: str
    username: str
    role: str


# ------------------------------ Settings ----------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Token signing configuration, read once at startup.

    :param signing_key: Symmetric HS256 key.
    :type signing_key: str
    :param issuer: ``iss`` claim.
    :type issuer: str
    :param audience: ``aud`` claim.
    :type audience: str
    :param access_token_minutes: Access-token lifetime in minutes.
    :type access_token_minutes: int
    :param algorithm: JWS algorithm.
    :type algorithm: str
    """

    signing_key: str
    issuer: str
    audience: str
    access_token_minutes: int = 15
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        errors: dict[str, list[str]] = {}
        if not self.signing_key:
            errors["signing_key"] = ["Signing key is required."]
        if not self.issuer:
            errors["issuer"] = ["Issuer is required."]
        if not self.audience:
            errors["audience"] = ["Audience is required."]
        if self.access_token_minutes <= 0:
            errors["access_token_minutes"] = ["Must be greater than zero."]
        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AuthSettings:
        """Build settings from a Flask config mapping."""
        return cls(
            signing_key=config.get("JWT_SECRET_KEY") or "",
            issuer=config.get("JWT_ISSUER") or "",
            audience=config.get("JWT_AUDIENCE") or "",
            access_token_minutes=int(config.get("JWT_ACCESS_TOKEN_MINUTES", 15)),
            algorithm=config.get("JWT_ALGORITHM") or "HS256",
        )
