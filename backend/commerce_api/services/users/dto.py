"""
DTOs for UserService.

Data Transfer Objects (DTOs) isolate the service layer from ORM models,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UserRegistrationIn:
    """
    Input DTO for user registration.

    :param username: Login name (at least two characters).
    :type username: str
    :param password: Raw password (at least six characters) hashed by the service.
    :type password: str
    :param role_id: Optional explicit role; the default role is used otherwise.
    :type role_id: int | None
    """

    username: str
    password: str
    role_id: int | None = None


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public projection of a user; never carries credentials or tokens.

    :param id: User identifier.
    :type id: int
    :param username: Login name.
    :type username: str
    :param role: Role name.
    :type role: str
    """

    id: int
    username: str
    role: str
