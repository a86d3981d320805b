"""
Property Lookup Dependencies for FastAPI

Builds the lookup service from settings: the RentCast client from the client
factory, the cache store selected by DATABASE_URL, and the metrics observer.
"""

import logging
from typing import Optional

from property_lookup.clients.base.exceptions import ClientConfigurationError, ClientError
from property_lookup.clients.factory import get_rentcast_client
from property_lookup.core.config import get_settings
from property_lookup.core.error_handler import create_error_context, handle_api_error
from property_lookup.monitoring.lookup_observer import LookupObserver, get_prometheus_observer
from property_lookup.services.property.lookup_service import PropertyLookupService
from property_lookup.services.property.transformer import PropertyOverrides
from property_lookup.services.repositories.property_cache_repository import (
    InMemoryPropertyCache,
    PostgresPropertyCache,
    PropertyCacheStore,
)

logger = logging.getLogger(__name__)

_property_cache: Optional[PropertyCacheStore] = None


def get_property_cache() -> PropertyCacheStore:
    """
    Get the process-wide property cache store.

    Uses the ``properties`` table when DATABASE_URL is configured and an
    in-process store otherwise.
    """
    global _property_cache
    if _property_cache is None:
        settings = get_settings()
        if settings.database_url:
            _property_cache = PostgresPropertyCache()
        else:
            logger.warning(
                "DATABASE_URL not configured - property cache is in-memory and per-process"
            )
            _property_cache = InMemoryPropertyCache()
    return _property_cache


def get_lookup_observer() -> LookupObserver:
    if get_settings().enable_metrics:
        return get_prometheus_observer()
    return LookupObserver()


async def get_property_lookup_service() -> PropertyLookupService:
    """
    Get a property lookup service for the current request.

    Raises:
        HTTPException: 500 (kind ``configuration``) if the provider client or
            the override table cannot be built from settings
    """
    settings = get_settings()
    try:
        provider = await get_rentcast_client()
        overrides = PropertyOverrides(settings.property_overrides)
    except ClientConfigurationError as e:
        raise handle_api_error(e, create_error_context(operation="build_lookup_service"))
    except ClientError as e:
        error = ClientConfigurationError(
            "Property provider client could not be configured",
            client_name=e.client_name,
            original_error=e,
        )
        raise handle_api_error(error, create_error_context(operation="build_lookup_service"))

    return PropertyLookupService(
        provider=provider,
        cache=get_property_cache(),
        observer=get_lookup_observer(),
        overrides=overrides,
        max_age_hours=settings.cache_max_age_hours,
    )
