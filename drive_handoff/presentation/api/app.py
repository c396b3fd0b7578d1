"""
FastAPI application factory and configuration.

This module creates and configures the FastAPI application with
middleware, error handling and route registration for the session broker.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ...application.startup import ApplicationStartup
from ...core.errors import UploadError
from ...infrastructure.config.models import ApplicationConfig
from .middleware import ErrorHandlerMiddleware, RequestIdMiddleware
from .routers import folders, health, upload

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Starts the provider client on startup and closes it on shutdown.
    """
    startup: ApplicationStartup = app.state.startup
    logger.info("Application starting up...")

    await startup.start_application()

    yield

    logger.info("Application shutting down...")
    await startup.stop_application()


def create_app(startup: ApplicationStartup, config: ApplicationConfig) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        startup: Service wiring and lifecycle manager
        config: Application configuration

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=config.name,
        version=config.version,
        description="Hands out single-use resumable upload sessions for direct-to-Drive uploads",
        debug=config.debug,
        lifespan=lifespan
    )

    app.state.startup = startup
    app.state.config = config

    _configure_middleware(app, config)
    _register_exception_handlers(app)
    _register_routes(app)

    logger.info(f"FastAPI application created: {config.name} v{config.version}")
    return app


def create_app_from_config() -> FastAPI:
    """
    Create app from configuration (for uvicorn reload).

    The configuration file path is taken from DRIVE_HANDOFF_CONFIG_FILE and
    defaults to ``config.yaml`` when that file exists.
    """
    import os
    from pathlib import Path

    from ...infrastructure.config.loader import ConfigLoader

    config_file = os.environ.get("DRIVE_HANDOFF_CONFIG_FILE")
    if not config_file and Path("config.yaml").exists():
        config_file = "config.yaml"

    config = ConfigLoader().load_config(config_file)
    return create_app(ApplicationStartup(config), config)


def _configure_middleware(app: FastAPI, config: ApplicationConfig) -> None:
    """Configure application middleware."""

    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(RequestIdMiddleware)

    # Browsers call /upload and /folders cross-origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    logger.debug("Middleware configured")


def _register_exception_handlers(app: FastAPI) -> None:
    """Report every failure as 500 {error, details}."""

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError) -> JSONResponse:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message} "
            f"(details: {exc.details})"
        )
        return JSONResponse(status_code=500, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} rejected: {exc.errors()}")
        return JSONResponse(
            status_code=500,
            content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())}
        )


def _register_routes(app: FastAPI) -> None:
    """Register API routes."""

    app.include_router(
        health.router,
        prefix="/health",
        tags=["health"]
    )

    app.include_router(
        folders.router,
        tags=["folders"]
    )

    app.include_router(
        upload.router,
        tags=["upload"]
    )

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Root endpoint with basic application information."""
        return {
            "name": app.title,
            "version": app.version,
            "status": "running",
            "docs_url": "/docs",
            "health_url": "/health"
        }

    logger.debug("Routes registered")
