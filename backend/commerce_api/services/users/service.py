# commerce_api/services/users/service.py
from __future__ import annotations

import logging

from commerce_api.models.role import DEFAULT_ROLE_NAME
from commerce_api.models.user import User
from commerce_api.services._shared.base import BaseService, UnitOfWorkFactory
from commerce_api.services._shared.errors import NotFoundError
from commerce_api.services._shared.ports import PasswordHasher
from commerce_api.services.users.dto import UserPublicOut, UserRegistrationIn

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


class UserService(BaseService):
    """Registration and profile lookup."""

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher,
        uow_factory: UnitOfWorkFactory | None = None,
        default_role: str = DEFAULT_ROLE_NAME,
    ) -> None:
        super().__init__(uow_factory=uow_factory)
        self.hasher = password_hasher
        self.default_role = default_role

    def register(self, dto: UserRegistrationIn) -> int:
        """
        Create a user with a hashed password.

        :param dto: Registration input.
        :returns: New user id.
        :raises ValidationError: If username or password are too short.
        :raises NotFoundError: If the requested or default role does not exist.
        :raises ConflictError: If the username is taken.
        """
        username = (dto.username or "").strip()
        password = dto.password or ""
        self.raise_if_errors(
            {
                "username": (
                    [f"Username must be at least {MIN_USERNAME_LENGTH} characters."]
                    if len(username) < MIN_USERNAME_LENGTH
                    else []
                ),
                "password": (
                    [f"Password must be at least {MIN_PASSWORD_LENGTH} characters."]
                    if len(password) < MIN_PASSWORD_LENGTH
                    else []
                ),
            }
        )

        with self.uow() as uow:
            if dto.role_id is not None:
                role = uow.roles.get_by_id(dto.role_id)
                if role is None:
                    raise NotFoundError("Role", dto.role_id)
            else:
                role = uow.roles.get_by_name(self.default_role)
                if role is None:
                    raise NotFoundError("Role", self.default_role)

            user = User(
                username=username,
                password_hash=self.hasher.hash(password),
                role_id=role.id,
            )
            user_id = uow.users.add(user)
            uow.save()

        logger.info("User registered", extra={"user_id": user_id, "username": username})
        return user_id

    def get_profile(self, user_id: int) -> UserPublicOut:
        """
        Return the public profile of a user.

        :raises NotFoundError: If the user does not exist.
        """
        with self.uow() as uow:
            user = uow.users.get_with_role(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut(id=user.id, username=user.username, role=user.role.name)
