"""User schemas."""

from datetime import datetime

from usergate.schemas.base import ApiModel


class UserCreate(ApiModel):
    """Create a user without a credential."""

    name: str | None = None
    email: str | None = None


class RoleUpdate(ApiModel):
    """Change a user's role (admin only)."""

    user_id: str | None = None
    role: str | None = None


class UserResponse(ApiModel):
    """User information response. Never includes the credential."""

    id: str
    name: str | None
    email: str
    role: str
    created_at: datetime
    updated_at: datetime


class UserSummary(ApiModel):
    """Short user form returned after a role change."""

    id: str
    name: str | None
    email: str
    role: str


class AdminUserResponse(UserResponse):
    """User row in the admin listing."""

    session_count: int = 0


class PaginationResponse(ApiModel):
    """Pagination block of the admin listing."""

    page: int
    limit: int
    total: int
    total_pages: int
