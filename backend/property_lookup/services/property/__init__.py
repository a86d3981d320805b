"""
Property lookup services.
"""

from .lookup_service import LookupState, PropertyLookupResult, PropertyLookupService
from .transformer import PropertyOverrides, latest_year_entry, transform

__all__ = [
    "LookupState",
    "PropertyLookupResult",
    "PropertyLookupService",
    "PropertyOverrides",
    "latest_year_entry",
    "transform",
]
