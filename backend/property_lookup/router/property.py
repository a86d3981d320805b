"""
Property lookup API routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from property_lookup.clients.base.exceptions import InvalidPropertyAddressError
from property_lookup.core.error_handler import create_error_context, handle_api_error
from property_lookup.dependencies.property import get_property_lookup_service
from property_lookup.schema.property import PropertyLookupResponse
from property_lookup.services.property.lookup_service import PropertyLookupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/property", tags=["Property"])


def require_address(
    address: Optional[str] = Query(None, description="Street address to look up"),
) -> str:
    """Reject a missing or blank address before the lookup service is built."""
    if address is None or not address.strip():
        raise handle_api_error(
            InvalidPropertyAddressError(address, reason="address must not be blank"),
            create_error_context(operation="lookup_property", address=address),
        )
    return address


@router.get(
    "",
    response_model=PropertyLookupResponse,
    status_code=status.HTTP_200_OK,
    summary="Look up a property by street address",
    description="""
    Returns the normalized property record for an address.

    Records are served from the cache when they were fetched within the
    freshness window (`cached: true`, `cachedAt` is the time of that fetch);
    otherwise they are fetched from RentCast and cached.
    """,
)
async def lookup_property(
    address: str = Depends(require_address),
    service: PropertyLookupService = Depends(get_property_lookup_service),
) -> PropertyLookupResponse:
    """Look up a property, preferring a fresh cached record."""
    logger.info("Received property lookup request", extra={"address": address})
    context = create_error_context(operation="lookup_property", address=address)

    try:
        result = await service.lookup(address)
    except Exception as e:
        raise handle_api_error(e, context)

    return result.to_response()
