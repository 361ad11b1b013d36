from .dto import AuthResult, AuthSettings, LoginIn, RefreshIn
from .service import REFRESH_TOKEN_LIFETIME, AuthService

__all__ = [
    "AuthResult",
    "AuthService",
    "AuthSettings",
    "LoginIn",
    "REFRESH_TOKEN_LIFETIME",
    "RefreshIn",
]
