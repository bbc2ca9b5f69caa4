"""Demo endpoints that need no session."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request

from usergate.errors import ValidationError

router = APIRouter(prefix="/api/hello", tags=["hello"])


@router.get("")
async def hello():
    """Return a greeting with the server time."""
    return {
        "message": "Hello from the usergate API!",
        "timestamp": datetime.now(UTC).isoformat(),
        "status": "success",
    }


@router.post("")
async def echo(request: Request):
    """Echo the posted JSON back."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON") from exc
    return {
        "message": "Data received successfully",
        "data": body,
        "status": "success",
    }
