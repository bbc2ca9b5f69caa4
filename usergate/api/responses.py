"""Uniform JSON envelopes for API responses.

Success: ``{"success": true, "data": <payload>}``.
Error: ``{"success": false, "error": <message>}``. The message is the only
description of the failure; there is no separate error code.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from usergate.errors import Unexpected

logger = logging.getLogger(__name__)


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(
        content={"success": True, "data": jsonable_encoder(data)},
        status_code=status_code,
    )


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        content={"success": False, "error": message},
        status_code=status_code,
        headers=headers,
    )


def server_error_response(message: str = "Internal server error") -> JSONResponse:
    return error_response(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


@contextmanager
def store_errors(db: Session, message: str) -> Iterator[None]:
    """Roll back and re-raise store failures as ``Unexpected(message)``.

    The original exception is logged, never returned to the client.
    """
    try:
        yield
    except SQLAlchemyError:
        db.rollback()
        logger.exception(message)
        raise Unexpected(message) from None
