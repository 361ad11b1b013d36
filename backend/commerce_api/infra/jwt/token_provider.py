# commerce_api/infra/jwt/token_provider.py
from __future__ import annotations

from datetime import datetime
from typing import Any, cast
from uuid import uuid4

import jwt

from commerce_api.services._shared.ports import TokenProvider
from commerce_api.services.auth.dto import AuthSettings

ACCESS_TOKEN_TYPE = "access"


class JWTTokenProvider(TokenProvider):
    """
    HS256 access-token adapter built on PyJWT.

    Tokens carry the same registered claims Flask-JWT-Extended expects
    (``sub``, ``iat``, ``nbf``, ``exp``, ``jti``, ``type``, ``fresh``), so the
    request-side ``@jwt_required`` decorators verify them with the mirrored
    ``JWT_DECODE_ISSUER`` / ``JWT_DECODE_AUDIENCE`` settings.

    This is the only component that touches the signing key.
    """

    __slots__ = ("_settings",)

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any],
        issued_at: datetime,
        expires_at: datetime,
    ) -> str:
        payload: dict[str, Any] = dict(claims)
        payload.update(
            {
                "sub": str(identity),
                "iss": self._settings.issuer,
                "aud": self._settings.audience,
                "iat": issued_at,
                "nbf": issued_at,
                "exp": expires_at,
                "jti": str(uuid4()),
                "type": ACCESS_TOKEN_TYPE,
                "fresh": False,
            }
        )
        return jwt.encode(payload, self._settings.signing_key, algorithm=self._settings.algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify signature, expiry, issuer and audience, returning the claims.

        :raises jwt.InvalidTokenError: If any check fails.
        """
        return cast(
            dict[str, Any],
            jwt.decode(
                token,
                self._settings.signing_key,
                algorithms=[self._settings.algorithm],
                issuer=self._settings.issuer,
                audience=self._settings.audience,
            ),
        )
