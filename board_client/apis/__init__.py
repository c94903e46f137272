from .auth_api import AuthApi
from .users_api import UsersApi

__all__ = ["AuthApi", "UsersApi"]
