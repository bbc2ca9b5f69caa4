"""User API endpoints for any signed-in caller."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from usergate.api.dependencies import get_current_caller, get_user_service, json_body
from usergate.api.responses import store_errors, success_response
from usergate.schemas.user import UserCreate, UserResponse
from usergate.services.access import Caller
from usergate.services.users import UserService
from usergate.services.validation import normalize_email, validate_email, validate_required

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
def list_users(
    caller: Annotated[Caller, Depends(get_current_caller)],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """List all users, oldest first."""
    with store_errors(service.db, "Failed to fetch users"):
        users = service.list_users()
    return success_response([UserResponse.model_validate(user) for user in users])


@router.post("")
def create_user(
    caller: Annotated[Caller, Depends(get_current_caller)],
    user_data: Annotated[UserCreate, Depends(json_body(UserCreate))],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Create a user without a credential."""
    validate_required({"name": user_data.name, "email": user_data.email})
    validate_email(normalize_email(user_data.email))

    with store_errors(service.db, "Failed to create user"):
        user = service.create_user(user_data.name, user_data.email)

    return success_response(UserResponse.model_validate(user), status.HTTP_201_CREATED)
