"""Cyclone Watch FastAPI Application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from cyclonewatch.api import router
from cyclonewatch.config import Settings, load_settings
from cyclonewatch.models import ErrorCode
from cyclonewatch.services.access import AccessLayer
from cyclonewatch.services.cache import CACHE_TTLS, CacheStore
from cyclonewatch.services.hazard_api import HazardAPIClient, create_hazard_client
from cyclonewatch.services.orchestrator import DashboardOrchestrator
from cyclonewatch.services.ratelimit import RateLimiter
from cyclonewatch.services.storage import (
    InMemoryBackend,
    KeyValueBackend,
    RedisBackend,
    StorageManager,
)
from cyclonewatch.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def create_storage_backend(settings: Settings) -> KeyValueBackend:
    if settings.redis_url:
        logger.info("[STORAGE] Using Redis backend")
        return RedisBackend(settings.redis_url)
    logger.info("[STORAGE] REDIS_URL not set, using in-memory backend")
    return InMemoryBackend()


def _resource_ttls(settings: Settings) -> dict[str, float]:
    """Per-resource TTLs; CACHE_TTL_MINUTES overrides the five-minute ones."""
    default = CACHE_TTLS["cyclone"]
    return {
        key: settings.cache_ttl_seconds if ttl == default else ttl
        for key, ttl in CACHE_TTLS.items()
    }


def create_app(
    settings: Settings | None = None,
    client: HazardAPIClient | None = None,
    backend: KeyValueBackend | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        client: Upstream client; built from ``settings`` when omitted.
        backend: Storage backend; Redis or in-memory per ``settings``.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build services on startup, stop the ticker and close clients on shutdown."""
        configure_logging(settings.log_level)

        cache = CacheStore()
        access = AccessLayer(cache, RateLimiter(), cache_enabled=settings.cache_enabled)
        hazard_client = client or create_hazard_client(settings)
        storage_backend = backend or create_storage_backend(settings)
        storage = StorageManager(storage_backend)
        orchestrator = DashboardOrchestrator(
            hazard_client,
            access,
            ttls=_resource_ttls(settings),
            mock_mode=settings.enable_mock_data,
            refresh_interval=settings.refresh_interval_seconds,
        )

        app.state.settings = settings
        app.state.storage = storage
        app.state.orchestrator = orchestrator

        storage.clear_older_than()
        await orchestrator.refresh_all()
        await orchestrator.check_health()
        if settings.auto_refresh:
            orchestrator.start()

        yield

        await orchestrator.stop()
        await hazard_client.close()
        if isinstance(storage_backend, RedisBackend):
            storage_backend.close()

    app = FastAPI(
        title="Cyclone Watch API",
        description="Cyclone hazard dashboard data engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors."""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": str(exc),
                    "user_message": "Invalid request format. Please check your input.",
                },
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors."""
        logger.exception(f"[API] Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": {
                    "code": ErrorCode.API_ERROR.value,
                    "message": str(exc),
                    "user_message": "Something went wrong. Please try again.",
                },
            },
        )

    # Include API routes
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
