from kiwi_counter.models.login_session import LoginSession
from kiwi_counter.models.user import User

__all__ = [
    "LoginSession",
    "User",
]
