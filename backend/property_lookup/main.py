"""
Property Lookup FastAPI Backend
Cached street-address property lookups against RentCast
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import os
import logging
from typing import Any

from property_lookup import __version__
from property_lookup.core.config import get_settings
from property_lookup.core.logging_config import configure_logging

# Configure logging to respect LOG_LEVEL from environment or settings
settings = get_settings()

level_name = os.getenv("LOG_LEVEL", settings.log_level or "INFO").upper()
log_level = getattr(logging, level_name, logging.INFO)

# LOG_FORMAT in {json, console}
log_format_name = os.getenv("LOG_FORMAT", settings.log_format).lower()
configure_logging(level=log_level, use_json=log_format_name == "json")

logger = logging.getLogger(__name__)

from property_lookup.clients.factory import get_client_factory
from property_lookup.database.connection import ConnectionPoolManager, ensure_schema
from property_lookup.router.cache import router as cache_router
from property_lookup.router.health import router as health_router
from property_lookup.router.property import router as property_router
from property_lookup.services.property.transformer import PropertyOverrides


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting Property Lookup API...")

    # Malformed PROPERTY_OVERRIDES must stop startup, not surface per request
    overrides = PropertyOverrides(settings.property_overrides)
    if len(overrides):
        logger.info(f"Loaded property overrides for {len(overrides)} properties")

    if settings.database_url:
        try:
            await ensure_schema()
        except Exception as e:
            # Lookups still succeed uncached while the database is unreachable
            logger.error(f"Property cache schema setup failed: {e}")
    else:
        logger.warning("DATABASE_URL not set; using in-memory property cache")

    logger.info("Property Lookup API started successfully")

    yield

    logger.info("Shutting down Property Lookup API...")
    await get_client_factory().close_all()
    await ConnectionPoolManager.close()
    logger.info("Property Lookup API shutdown complete")


app = FastAPI(
    title="Property Lookup API",
    description="Cached property records by street address",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "Cache-Control"],
    max_age=3600,
)

app.include_router(health_router)
app.include_router(property_router)
app.include_router(cache_router)


if __name__ == "__main__":
    uvicorn.run(
        "property_lookup.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=settings.environment == "development",
    )
