"""
SwiftDrop API application.

Wires logging, middleware, error envelopes and the v1 routes together.
Run with: uvicorn swiftdrop.app.main:app
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from swiftdrop.app.core.config import settings
from swiftdrop.app.core.observability import ObservabilityMiddleware, setup_logging
from swiftdrop.app.core.redis_client import redis_available
from swiftdrop.app.api.v1.router import router as api_v1_router
from swiftdrop.app.db.session import engine, Base
from swiftdrop.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Registers the tables on Base.metadata
from swiftdrop.app.models.user import User  # noqa: F401
from swiftdrop.app.models.parcel import Parcel, ParcelStatusLog  # noqa: F401

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Parcel tracking API: create parcels, follow them by tracking ID and manage their status",
    lifespan=lifespan,
)

# Added last means outermost: CORS answers preflights before the access log
app.add_middleware(ObservabilityMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_origin_regex=settings.cors_allowed_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "X-Correlation-ID"],
)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Liveness probe.

    The API stays "healthy" when Redis is down (logout revocation degrades),
    the redis field reports it.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "up" if await redis_available() else "down",
    }


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "SwiftDrop API is running",
        "docs": "/docs",
        "health": "/health",
    }
