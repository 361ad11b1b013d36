from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for salted one-way password hashing."""

    def hash(self, password: str) -> str: ...

    def verify(self, password_hash: str, password: str) -> bool:
        """Compare in constant time; never raises for malformed hashes."""
        ...
