"""Authentication schemas.

Request fields are optional at the schema level; presence and format are
checked by ``usergate.services.validation`` so every missing field is
reported in one message.
"""

from datetime import datetime

from usergate.schemas.base import ApiModel
from usergate.schemas.user import UserResponse


class UserRegister(ApiModel):
    """User registration request."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class UserLogin(ApiModel):
    """User login request."""

    email: str | None = None
    password: str | None = None


class CallerResponse(ApiModel):
    """The signed-in caller as exposed to handlers and clients."""

    id: str
    email: str
    name: str | None
    role: str


class LoginResponse(ApiModel):
    """Session token plus the signed-in user."""

    token: str
    expires_at: datetime
    user: UserResponse
