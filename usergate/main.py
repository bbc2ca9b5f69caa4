"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from usergate.api import admin_users, auth, hello, protected, users
from usergate.api.dependencies import describe_validation_errors
from usergate.api.responses import error_response, server_error_response
from usergate.config import get_settings
from usergate.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    setup_logging(settings.log_level, settings.log_file)
    logger.info(f"Starting usergate API ({settings.environment})")
    yield
    logger.info("Stopping usergate API")


app = FastAPI(
    title="usergate API",
    description="Session-gated, role-scoped user management API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error, ours and the framework's, in the error envelope."""
    return error_response(str(exc.detail), exc.status_code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(describe_validation_errors(exc.errors()))


@app.middleware("http")
async def unhandled_error_middleware(request: Request, call_next):
    """Log anything the routes let escape once and answer with a generic 500."""
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return server_error_response()


# Register routers
app.include_router(hello.router)
app.include_router(protected.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(admin_users.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
