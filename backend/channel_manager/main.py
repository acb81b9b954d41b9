"""Channel Manager - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from channel_manager.core.config import get_settings
from channel_manager.core.database import engine
from channel_manager.core.env_validation import validate_environment
from channel_manager.routers import (
    properties_router,
    bookings_router,
    analytics_router,
)

# Hard-fails (exit 1) if required configuration is missing
validate_environment()

settings = get_settings()

logger = logging.getLogger("channel_manager")

RETRY_AFTER_SECONDS = 5


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"[APP] {settings.app_name} starting, CORS origins: {settings.origins}")
    yield
    await engine.dispose()
    logger.info("[APP] Database engine disposed")


app = FastAPI(
    title=settings.app_name,
    description="Property channel manager: bookings without double-booking, free gaps and occupancy per property.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Wildcard origins are blocked outside debug by env_validation.py
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OperationalError)
@app.exception_handler(InterfaceError)
async def database_unavailable_handler(request: Request, exc: DBAPIError):
    """The store could not be reached; nothing was written and the call may be retried."""
    logger.error(f"[DB] {request.method} {request.url.path} failed: {exc.__class__.__name__}: {exc.orig}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": {
                "code": "service_unavailable",
                "message": "The booking store is temporarily unavailable. Please retry.",
                "retryable": True,
            }
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


# API v1 routers
app.include_router(properties_router, prefix=settings.api_v1_prefix)
app.include_router(bookings_router, prefix=settings.api_v1_prefix)
app.include_router(analytics_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
    }
