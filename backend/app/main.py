"""
FastAPI Application Entry Point.

This is the main application file for the Geo Tracking Backend.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from backend.app.core.config import Settings, settings
from backend.app.core.observability import ObservabilityMiddleware, configure_logging
from backend.app.api.router import router as api_router
from backend.app.db.session import Base, build_engine, build_session_factory
from backend.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from backend.app.models.user import User
from backend.app.models.geo_tracking import GeoTracking

logger = logging.getLogger("geotracking")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    Creates database tables on startup and disposes the engine on shutdown.
    """
    engine = app.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")
    yield
    await engine.dispose()


def create_app(config: Settings = settings) -> FastAPI:
    """Build the application from an explicit settings object."""
    configure_logging(config.log_level)

    app = FastAPI(
        title=config.app_name,
        version=config.api_version,
        debug=config.debug,
        description="Ingests and serves geolocation telemetry from mobile field agents",
        lifespan=lifespan,
    )

    # Database wiring comes from the injected settings, not the module-level ones
    app.state.engine = build_engine(config)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.add_middleware(ObservabilityMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Register global exception handlers
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint.

        Returns:
            dict: Status and application information
        """
        return {
            "status": "healthy",
            "app_name": config.app_name,
            "version": config.api_version,
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": "Geo Tracking Backend is running!",
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(api_router, prefix=config.api_prefix)
    return app


app = create_app()
