"""API error taxonomy.

Every error is an ``HTTPException`` carrying a status code and a plain-string
message. The application's exception handler renders them into the
``{"success": false, "error": <message>}`` envelope, so services and route
handlers only ever raise.
"""

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=message or self.default_message,
            headers=headers,
        )

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(ApiError):
    """User-correctable input problem."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthorized(ApiError):
    """No valid session on the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized - Please sign in"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    """Authenticated, but the caller's role is insufficient."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ApiError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class TooManyRequests(ApiError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests - Please try again later"


class Unexpected(ApiError):
    """Store or programming failure. The message never carries internal detail."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
