"""Example endpoint that only needs a session."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder

from usergate.api.dependencies import get_current_caller
from usergate.schemas.auth import CallerResponse
from usergate.services.access import Caller

router = APIRouter(prefix="/api/protected", tags=["protected"])


@router.get("")
async def protected(caller: Annotated[Caller, Depends(get_current_caller)]):
    """Return data visible to any signed-in user."""
    return {
        "message": "This is protected data",
        "user": jsonable_encoder(CallerResponse.model_validate(caller)),
        "accessTime": datetime.now(UTC).isoformat(),
    }
