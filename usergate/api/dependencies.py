"""FastAPI dependencies for authentication, request bodies and services.

Auth dependencies are declared before body dependencies in every handler so
the caller is resolved (and 401/403 raised) before the body is even parsed.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from usergate.database import get_db
from usergate.errors import ValidationError
from usergate.services import access, rate_limit
from usergate.services.access import Caller
from usergate.services.auth import resolve_caller
from usergate.services.users import UserService

ModelT = TypeVar("ModelT", bound=BaseModel)

# auto_error=False: a missing header must surface as our 401, not FastAPI's 403
security = HTTPBearer(auto_error=False)


def get_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> Caller | None:
    """Resolve the caller from the bearer token, or None when anonymous."""
    token = credentials.credentials if credentials else None
    return resolve_caller(db, token)


def get_current_caller(
    caller: Annotated[Caller | None, Depends(get_caller)],
) -> Caller:
    """Require an authenticated caller (401 otherwise)."""
    return access.require_auth(caller)


def require_admin(
    caller: Annotated[Caller | None, Depends(get_caller)],
) -> Caller:
    """Require an admin caller (401 when anonymous, 403 for other roles)."""
    return access.require_admin(caller)


def describe_validation_errors(errors: list[dict]) -> str:
    """Turn pydantic/FastAPI error entries into one plain message."""
    if any(error.get("type") == "json_invalid" for error in errors):
        return "Invalid JSON in request body"
    fields = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query")]
        if loc and loc[-1] not in fields:
            fields.append(loc[-1])
    if not fields:
        return "Invalid request"
    return f"Invalid value for field: {', '.join(fields)}"


def json_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """Build a dependency that parses the JSON body into ``model``."""

    async def dependency(request: Request) -> ModelT:
        try:
            payload = await request.json()
        except ValueError as exc:
            raise ValidationError("Invalid JSON in request body") from exc
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            return model.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(describe_validation_errors(exc.errors())) from exc

    return dependency


def rate_limited(scope: str) -> Callable[[Request], None]:
    """Build a dependency that counts the request against ``scope``'s limit."""

    def dependency(request: Request) -> None:
        client_id = request.client.host if request.client else "unknown"
        rate_limit.enforce(scope, client_id)

    return dependency


def get_user_service(
    db: Annotated[Session, Depends(get_db)],
) -> UserService:
    """Get user service with dependencies."""
    return UserService(db)
