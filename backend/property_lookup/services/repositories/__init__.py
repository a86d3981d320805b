"""
Repositories over the property lookup persistence layer.
"""

from .property_cache_repository import (
    CachedProperty,
    CacheStats,
    InMemoryPropertyCache,
    PostgresPropertyCache,
    PropertyCacheStore,
    is_cache_fresh,
)

__all__ = [
    "CachedProperty",
    "CacheStats",
    "InMemoryPropertyCache",
    "PostgresPropertyCache",
    "PropertyCacheStore",
    "is_cache_fresh",
]
