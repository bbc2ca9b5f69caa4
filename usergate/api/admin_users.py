"""Admin-only user management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from usergate.api.dependencies import get_user_service, json_body, require_admin
from usergate.api.responses import store_errors, success_response
from usergate.config import get_settings
from usergate.errors import ValidationError
from usergate.schemas.user import AdminUserResponse, PaginationResponse, RoleUpdate, UserSummary
from usergate.services.access import Caller
from usergate.services.users import UserService, parse_pagination
from usergate.services.validation import validate_required

settings = get_settings()

router = APIRouter(prefix="/api/admin/users", tags=["admin"])


@router.get("")
def list_users(
    caller: Annotated[Caller, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    search: Annotated[str, Query()] = "",
):
    """List users newest first, filtered by name/email substring, one page at a time."""
    pagination = parse_pagination(page, limit, settings.admin_page_size_max)

    with store_errors(service.db, "Failed to fetch users"):
        result = service.list_page(pagination, search)

        users = []
        for user, session_count in result.items:
            user_response = AdminUserResponse.model_validate(user)
            user_response.session_count = session_count
            users.append(user_response)

    return success_response(
        {
            "users": users,
            "pagination": PaginationResponse(
                page=result.page,
                limit=result.limit,
                total=result.total,
                total_pages=result.total_pages,
            ),
        }
    )


@router.patch("")
def update_user_role(
    caller: Annotated[Caller, Depends(require_admin)],
    update: Annotated[RoleUpdate, Depends(json_body(RoleUpdate))],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Change a user's role to ``user`` or ``admin``."""
    validate_required({"userId": update.user_id, "role": update.role})

    with store_errors(service.db, "Failed to update user"):
        user = service.update_role(update.user_id, update.role)
        summary = UserSummary.model_validate(user)

    return success_response({"message": "User role updated successfully", "user": summary})


@router.delete("")
def delete_user(
    caller: Annotated[Caller, Depends(require_admin)],
    service: Annotated[UserService, Depends(get_user_service)],
    user_id: Annotated[str | None, Query(alias="id")] = None,
):
    """Delete a user by id. Admins cannot delete their own account."""
    if not user_id:
        raise ValidationError("User ID is required")

    with store_errors(service.db, "Failed to delete user"):
        service.delete_user(user_id, caller.id)

    return success_response({"message": "User deleted successfully"})
