"""SQLAlchemy models."""

from usergate.models.session import UserSession
from usergate.models.user import User

__all__ = [
    "User",
    "UserSession",
]
