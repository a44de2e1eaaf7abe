"""
FastAPI application entry point.

This module creates and configures the FastAPI application through an
application factory, so tests can build apps with their own settings or a
prepared service container.

For local development:
    uvicorn vidsum.main:app --reload

For production:
    gunicorn vidsum.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.dependencies import ServiceContainer, build_container
from .api.routes import auth, health, users, videos
from .config.settings import Settings, get_settings
from .core.errors import AppError, ErrorKind

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "AUTHENTICATION_ERROR",
    403: "AUTHORIZATION_ERROR",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def error_body(message: str, code: str, details: Any = None) -> dict:
    error = {"message": message, "code": code}
    if details is not None:
        error["details"] = details
    return {"success": False, "error": error}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    settings: Settings = app.state.container.settings

    logger.info(
        "VidSum API starting",
        extra={
            "version": __version__,
            "environment": settings.environment,
            "mock_mode": {
                "snowflake": settings.snowflake_mock_mode,
                "storage": settings.storage_mock_mode,
                "email": settings.email_mock_mode,
            }
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("VidSum API shutting down")


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map every failure to the `{success: false, error: {...}}` envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.kind is ErrorKind.INTERNAL or exc.kind is ErrorKind.UPSTREAM:
            log = logger.error
        else:
            log = logger.info
        log(
            "Request failed",
            extra={
                "path": request.url.path,
                "method": request.method,
                "kind": exc.kind.value,
                "code": exc.code,
            }
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=ErrorKind.VALIDATION.http_status,
            content=error_body("Validation failed", "VALIDATION_ERROR", details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all exception handler.

        Logs the full error server-side and returns a generic message;
        exception details are included only in development.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        details = None
        if settings.is_development:
            details = {"type": type(exc).__name__, "error": str(exc)}

        return JSONResponse(
            status_code=ErrorKind.INTERNAL.http_status,
            content=error_body("Internal server error", "INTERNAL_ERROR", details),
        )


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration; defaults to the cached environment settings
        container: Pre-built services; built from settings when omitted
    """
    if container is None:
        settings = settings or get_settings()
        container = build_container(settings)
    settings = container.settings

    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Upload videos and read their summaries.

        ## Authentication

        Register, verify your email with the emailed code, then log in.
        Send the returned token as `Authorization: Bearer <token>`.

        ## Upload workflow

        1. `POST /videos` with the file's metadata; receive an upload URL
        2. `PUT` the file to the upload URL
        3. `POST /videos/{id}/confirm`; the video becomes READY
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/user", tags=["User"])
    app.include_router(videos.router, prefix="/videos", tags=["Videos"])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "VidSum API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    register_exception_handlers(app, settings)

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "vidsum.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
