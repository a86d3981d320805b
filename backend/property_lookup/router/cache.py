"""Cache maintenance and statistics endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from property_lookup.core.config import get_settings
from property_lookup.dependencies.property import get_property_cache
from property_lookup.schema.property import CacheStatsResponse, CacheSweepResponse
from property_lookup.services.repositories.property_cache_repository import PropertyCacheStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/cache", tags=["cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def get_cache_stats(
    cache: PropertyCacheStore = Depends(get_property_cache),
) -> CacheStatsResponse:
    """
    Get property cache statistics.

    Returns:
        Entry count, average access count, oldest and newest entry times
    """
    stats = await cache.stats()
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "Cache statistics unavailable", "kind": "storage"},
        )

    return CacheStatsResponse(
        total_entries=stats.total_entries,
        avg_access_count=stats.avg_access_count,
        oldest_entry=stats.oldest_entry,
        newest_entry=stats.newest_entry,
    )


@router.post("/sweep", response_model=CacheSweepResponse)
async def sweep_cache(
    older_than_days: Optional[int] = Query(
        None, ge=1, description="Delete entries not refreshed within this many days"
    ),
    cache: PropertyCacheStore = Depends(get_property_cache),
) -> CacheSweepResponse:
    """Delete cache entries past the retention age."""
    days = older_than_days if older_than_days is not None else get_settings().cache_retention_days
    deleted = await cache.sweep(days)
    logger.info("Cache sweep requested", extra={"deleted": deleted, "older_than_days": days})
    return CacheSweepResponse(deleted=deleted, older_than_days=days)
