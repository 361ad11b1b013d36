from __future__ import annotations

from datetime import datetime
from itertools import count
from typing import Any, Protocol


class TokenProvider(Protocol):
    """Port for minting and decoding signed access tokens."""

    def create_access_token(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any],
        issued_at: datetime,
        expires_at: datetime,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self) -> None:
        self._seq = count(1)
        self._issued: dict[str, dict[str, Any]] = {}

    def create_access_token(
        self,
        *,
        identity: int | str,
        claims: dict[str, Any],
        issued_at: datetime,
        expires_at: datetime,
    ) -> str:
        token = f"access.{identity}.{next(self._seq)}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        payload.update(claims)
        self._issued[token] = payload
        return token

    def decode(self, token: str) -> dict[str, Any]:
        return self._issued[token]
