"""
commerce_api.services._shared.ports
===================================

*Ports* (hexagonal interfaces) used by the authentication service.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the access-token signing abstraction,
    plus a deterministic :class:`~.StubTokenProvider` for unit tests.

- :mod:`password_hasher`:
    Defines :class:`~.PasswordHasher`, the one-way credential hashing
    abstraction.

Concrete adapters live under ``commerce_api.infra``.
"""

from __future__ import annotations

from .password_hasher import PasswordHasher
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "PasswordHasher",
    "StubTokenProvider",
    "TokenProvider",
]
