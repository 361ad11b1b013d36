from .dto import UserPublicOut, UserRegistrationIn
from .service import UserService

__all__ = ["UserPublicOut", "UserRegistrationIn", "UserService"]
