"""Pydantic schemas for API requests and responses."""

from usergate.schemas.auth import CallerResponse, LoginResponse, UserLogin, UserRegister
from usergate.schemas.user import (
    AdminUserResponse,
    PaginationResponse,
    RoleUpdate,
    UserCreate,
    UserResponse,
    UserSummary,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "LoginResponse",
    "CallerResponse",
    "UserCreate",
    "RoleUpdate",
    "UserResponse",
    "UserSummary",
    "AdminUserResponse",
    "PaginationResponse",
]
