"""Health check router."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from property_lookup import __version__
from property_lookup.clients.factory import get_client_factory
from property_lookup.core.config import get_settings
from property_lookup.database.connection import ConnectionPoolManager
from property_lookup.dependencies.property import get_property_cache
from property_lookup.services.repositories.property_cache_repository import PropertyCacheStore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "environment": get_settings().environment,
    }


@router.get("/health/detailed")
async def detailed_health_check(
    cache: PropertyCacheStore = Depends(get_property_cache),
) -> Dict[str, Any]:
    """Health of the cache store and provider configuration. Never spends a provider call."""
    settings = get_settings()
    health_status: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "environment": settings.environment,
        "services": {},
    }

    cache_health = await cache.health_check()
    if settings.database_url:
        cache_health["pool"] = ConnectionPoolManager.get_metrics()
    health_status["services"]["property_cache"] = cache_health
    if cache_health["status"] != "healthy":
        health_status["status"] = "degraded"

    try:
        provider = get_client_factory().get_client("rentcast")
        provider_health = await provider.health_check()
    except Exception as e:
        logger.error(f"Provider health check failed: {e}")
        provider_health = {"status": "error", "error": str(e)}
    health_status["services"]["rentcast"] = provider_health
    if provider_health.get("status") != "healthy":
        health_status["status"] = "degraded"

    logger.info("Detailed health check", extra={"health_status": health_status["status"]})
    return health_status


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus exposition of lookup metrics."""
    if not get_settings().enable_metrics:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics disabled")
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
