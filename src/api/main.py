"""FastAPI application factory and lifespan management."""
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware import BodySizeLimitMiddleware, RequestLoggingMiddleware
from src.api.routes import health, thumbnails, videos
from src.core.config import Settings, get_settings
from src.core.exceptions import TubelyError
from src.core.logging import get_logger, setup_logging
from src.ingest.pipeline import VideoIngestionService
from src.ingest.toolkit import MediaToolkit, SubprocessToolkit
from src.storage.base import ObjectStorage
from src.storage.local import LocalStorage
from src.storage.metadata import MetadataStore
from src.storage.s3 import S3ObjectStorage, create_s3_client
from src.storage.signing import SignedUrlIssuer

logger = get_logger(__name__)


def create_app(
    app_settings: Settings | None = None,
    toolkit: MediaToolkit | None = None,
    object_storage: ObjectStorage | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``toolkit`` and ``object_storage`` default to ffmpeg subprocesses and
    S3; tests pass in-memory replacements.
    """
    settings = app_settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager for startup/shutdown."""
        # Startup
        setup_logging(settings.log_level)
        logger.info(
            "Starting Tubely",
            version=settings.app_version,
            environment=settings.environment.value,
        )

        metadata_store = MetadataStore(settings.database_url)
        await metadata_store.initialize()

        storage = object_storage or S3ObjectStorage(create_s3_client(settings))

        # Store shared state in app.state
        app.state.metadata_store = metadata_store
        app.state.object_storage = storage
        app.state.asset_storage = LocalStorage(settings.assets_path)
        app.state.url_issuer = SignedUrlIssuer(
            storage,
            default_ttl=timedelta(seconds=settings.signed_url_ttl_seconds),
        )
        app.state.ingestion_service = VideoIngestionService(
            settings.ingestion_config(),
            toolkit or SubprocessToolkit(timeout=settings.media_tool_timeout_seconds),
            storage,
            metadata_store,
        )
        app.state.ready = True

        yield

        # Shutdown
        logger.info("Shutting down Tubely")
        app.state.ready = False
        await metadata_store.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Video upload service with fast-start remuxing and signed delivery URLs",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Outermost, so oversized bodies never reach a route
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_video_size_bytes)

    # Exception handlers
    @app.exception_handler(TubelyError)
    async def tubely_error_handler(request: Request, exc: TubelyError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error("Application error", error=exc.message, details=exc.details)
        else:
            logger.warning("Request rejected", error=exc.message, details=exc.details)
        return JSONResponse(
            status_code=exc.http_status,
            content={
                "error": exc.__class__.__name__,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "HTTPException", "message": str(exc.detail), "details": {}},
            headers=getattr(exc, "headers", None),
        )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(
        videos.router,
        prefix=f"{settings.api_prefix}/videos",
        tags=["Videos"],
    )
    app.include_router(
        thumbnails.router,
        prefix=f"{settings.api_prefix}/thumbnails",
        tags=["Thumbnails"],
    )
    app.include_router(thumbnails.assets_router, tags=["Assets"])

    return app


# Application instance
app = create_app()


def run() -> None:
    """Run the application with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
