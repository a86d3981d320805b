"""
Schema models for the property lookup API.
"""

from .property import (
    AssessedValue,
    CacheStatsResponse,
    CacheSweepResponse,
    PropertyLookupResponse,
    TransformedProperty,
)

__all__ = [
    "AssessedValue",
    "CacheStatsResponse",
    "CacheSweepResponse",
    "PropertyLookupResponse",
    "TransformedProperty",
]
