"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quill.api.v1.router import api_router
from quill.config import get_settings
from quill.exceptions import (
    NotFound,
    ObjectExists,
    PermissionDenied,
    QuillError,
    StoreError,
    UniqueViolation,
    UploadFailed,
    ValidationFailed,
)
from quill.services.upload_service import UploadService

logger = logging.getLogger(__name__)

# Most specific first: ObjectExists is an UploadFailed, UniqueViolation a StoreError
_STATUS_BY_ERROR: list[tuple[type[QuillError], int]] = [
    (ValidationFailed, status.HTTP_400_BAD_REQUEST),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
    (UniqueViolation, status.HTTP_409_CONFLICT),
    (ObjectExists, status.HTTP_409_CONFLICT),
    (UploadFailed, status.HTTP_502_BAD_GATEWAY),
    (StoreError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(error: QuillError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def quill_error_handler(request: Request, exc: QuillError) -> JSONResponse:
    """Render service errors as ``{"error": kind, "detail": message}``."""
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"error": exc.kind, "detail": exc.message})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.environment)

    # Initialize database and bucket
    from quill.api.deps import get_object_storage
    from quill.db.postgres import init_db

    await init_db()
    logger.info("PostgreSQL tables initialized")

    try:
        await get_object_storage().create_bucket_if_not_exists()
        logger.info("Storage bucket ready")
    except Exception as e:
        logger.warning("Storage bucket init error (may be offline): %s", e)

    yield

    # Shutdown
    await UploadService.wait_for_cleanup()
    logger.info("Shutting down...")


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Student blogging platform: posts, comments, likes and reading lists",
        version="0.1.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan if use_lifespan else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(QuillError, quill_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()
