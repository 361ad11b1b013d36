"""Password hashing adapter backed by :mod:`werkzeug.security`."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from commerce_api.services._shared.ports import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted hashes via Werkzeug (scrypt/PBKDF2 depending on ``method``).

    :param method: Werkzeug hashing method string. Tests pass a cheap
        ``"pbkdf2:sha256:1000"`` to keep suites fast.
    :type method: str | None
    """

    def __init__(self, method: str | None = None) -> None:
        self._method = method

    def hash(self, password: str) -> str:
        if self._method:
            return generate_password_hash(password, method=self._method)
        return generate_password_hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        if not password_hash:
            return False
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # Unknown hash format stored in the row
            return False
