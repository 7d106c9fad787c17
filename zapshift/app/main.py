"""
FastAPI Application Entry Point.

This is the main application file for the ZapShift delivery backend.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from zapshift.app.api.v1.router import router as api_v1_router
from zapshift.app.core.config import settings
from zapshift.app.core.exceptions import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from zapshift.app.core.identity import build_identity_verifier
from zapshift.app.core.observability import ObservabilityMiddleware, configure_logging
from zapshift.app.core.redis_client import create_redis_client, get_redis, ping_redis
from zapshift.app.db.session import Database

# Import models to ensure they are registered with Base
from zapshift.app.models.user import User
from zapshift.app.models.rider import Rider, RiderCashout
from zapshift.app.models.parcel import Parcel
from zapshift.app.models.tracking_log import TrackingLog

configure_logging(settings.log_level)
logger = logging.getLogger("zapshift")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Builds the database handle and creates tables.
    2. Opens the Redis client and the identity verifier.
    3. Closes all of them on shutdown (SIGTERM/SIGINT via uvicorn).
    """
    database = Database.from_settings(settings)
    await database.create_all()
    app.state.database = database
    app.state.redis = create_redis_client(settings)
    app.state.identity_verifier = build_identity_verifier(settings)
    logger.info("%s started (auth=%s)", settings.app_name, settings.auth_provider)

    yield

    app.state.identity_verifier.close()
    await app.state.redis.aclose()
    await database.dispose()
    logger.info("%s stopped", settings.app_name)


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel delivery API: bookings, riders, tracking and rider earnings",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check(redis_client=Depends(get_redis)):
    """
    Health check endpoint.

    Returns:
        dict: Status, application information and Redis reachability
    """
    redis_ok = await ping_redis(redis_client)
    return {
        "status": "healthy" if redis_ok else "degraded",
        "redis": "ok" if redis_ok else "unavailable",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "ZapShift delivery server is running",
        "docs": "/docs",
        "health": "/health",
    }
