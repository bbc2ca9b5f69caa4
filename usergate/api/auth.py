"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from usergate.api.dependencies import (
    get_caller,
    get_current_caller,
    get_user_service,
    json_body,
    rate_limited,
)
from usergate.api.responses import store_errors, success_response
from usergate.database import get_db
from usergate.errors import Unauthorized
from usergate.schemas.auth import CallerResponse, LoginResponse, UserLogin, UserRegister
from usergate.schemas.user import UserResponse
from usergate.services.access import Caller
from usergate.services.auth import authenticate_user, create_session, revoke_session
from usergate.services.users import UserService
from usergate.services.validation import (
    normalize_email,
    validate_email,
    validate_password,
    validate_required,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", dependencies=[Depends(rate_limited("register"))])
def register(
    user_data: Annotated[UserRegister, Depends(json_body(UserRegister))],
    service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new user with a password credential."""
    validate_required(
        {"name": user_data.name, "email": user_data.email, "password": user_data.password}
    )
    validate_email(normalize_email(user_data.email))
    validate_password(user_data.password)

    with store_errors(service.db, "Failed to register user"):
        user = service.create_user(user_data.name, user_data.email, user_data.password)

    return success_response(UserResponse.model_validate(user))


@router.post("/login", dependencies=[Depends(rate_limited("login"))])
def login(
    credentials: Annotated[UserLogin, Depends(json_body(UserLogin))],
    db: Annotated[Session, Depends(get_db)],
):
    """Sign in with email and password and open a session."""
    validate_required({"email": credentials.email, "password": credentials.password})

    with store_errors(db, "Failed to sign in"):
        user = authenticate_user(db, credentials.email, credentials.password)
        if not user:
            logger.warning(f"Failed sign-in for {normalize_email(credentials.email)}")
            raise Unauthorized("Invalid email or password")
        token, expires_at = create_session(db, user)

    return success_response(
        LoginResponse(token=token, expires_at=expires_at, user=UserResponse.model_validate(user))
    )


@router.post("/logout")
def logout(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[Session, Depends(get_db)],
):
    """Sign out by closing the caller's session."""
    with store_errors(db, "Failed to sign out"):
        revoke_session(db, caller.session_id)
    return success_response({"message": "Signed out successfully"})


@router.get("/session")
def get_session(
    caller: Annotated[Caller | None, Depends(get_caller)],
):
    """Return the current caller, or null when there is no session."""
    return success_response(CallerResponse.model_validate(caller) if caller else None)
