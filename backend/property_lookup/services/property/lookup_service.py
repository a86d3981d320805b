"""
Property Lookup Service.

Coordinates the cache and the property data provider: serve fresh cache
entries without touching the provider, otherwise fetch, transform, persist
and return. Provider failures are classified into the stable error kinds the
API layer maps onto HTTP statuses. Nothing here retries; a failure is
terminal for the current request.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from property_lookup.clients.base.exceptions import (
    ClientAuthenticationError,
    ClientConfigurationError,
    ClientError,
    InvalidPropertyAddressError,
    PropertyAPIError,
    PropertyNotFoundError,
)
from property_lookup.clients.base.interfaces import PropertyDataProvider
from property_lookup.monitoring.lookup_observer import LookupObserver
from property_lookup.schema.property import PropertyLookupResponse, TransformedProperty
from property_lookup.services.property.transformer import PropertyOverrides, transform
from property_lookup.services.repositories.property_cache_repository import (
    DEFAULT_MAX_AGE_HOURS,
    PropertyCacheStore,
    is_cache_fresh,
)

logger = logging.getLogger(__name__)


class LookupState(str, Enum):
    START = "start"
    CACHE_CHECK = "cache_check"
    FRESH_HIT = "fresh_hit"
    STALE_OR_MISS = "stale_or_miss"
    FETCHING = "fetching"
    TRANSFORMED = "transformed"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PropertyLookupResult:
    """Outcome of a successful lookup."""
    property: TransformedProperty
    cached: bool
    cached_at: Optional[datetime] = None

    def to_response(self) -> PropertyLookupResponse:
        return PropertyLookupResponse(
            property=self.property, cached=self.cached, cached_at=self.cached_at
        )


class PropertyLookupService:
    """
    Cache-then-fetch property lookup.

    Args:
        provider: Property data provider client
        cache: Cache store for transformed records
        observer: Instrumentation hooks, no-op by default
        overrides: Per-property field overrides applied during transformation
        max_age_hours: Age at which cached records are refetched
        clock: Source of the current time for freshness checks
    """

    def __init__(
        self,
        provider: PropertyDataProvider,
        cache: PropertyCacheStore,
        observer: Optional[LookupObserver] = None,
        overrides: Optional[PropertyOverrides] = None,
        max_age_hours: float = DEFAULT_MAX_AGE_HOURS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.provider = provider
        self.cache = cache
        self.observer = observer or LookupObserver()
        self.overrides = overrides or PropertyOverrides()
        self.max_age_hours = max_age_hours
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _transition(self, state: LookupState, address: str) -> None:
        self.logger.debug(
            f"Lookup state -> {state.value}", extra={"address": address, "state": state.value}
        )

    def _notify(self, event: str, *args) -> None:
        try:
            getattr(self.observer, event)(*args)
        except Exception as e:
            self.logger.warning(f"Lookup observer failed on {event}: {e}")

    async def lookup(self, address: str) -> PropertyLookupResult:
        """
        Look up a property by street address.

        Returns:
            PropertyLookupResult with ``cached`` True when served from a fresh
            cache entry (``cached_at`` is that entry's last write time)

        Raises:
            InvalidPropertyAddressError: blank address, raised before any I/O
            ClientConfigurationError: provider credential missing
            PropertyNotFoundError: provider has no matching record
            ClientAuthenticationError: provider rejected the credential
            PropertyAPIError: any other provider failure
        """
        self._transition(LookupState.START, str(address))
        if not isinstance(address, str) or not address.strip():
            self._transition(LookupState.FAILED, str(address))
            raise InvalidPropertyAddressError(address, reason="address must not be blank")

        self._transition(LookupState.CACHE_CHECK, address)
        entry = await self.cache.get(address)

        if entry is not None and is_cache_fresh(
            entry.updated_at, self.max_age_hours, now=self._clock()
        ):
            try:
                cached_property = TransformedProperty.model_validate(entry.payload)
            except ValidationError as e:
                self.logger.warning(
                    f"Discarding unreadable cache entry: {e}", extra={"cache_key": entry.key}
                )
            else:
                self._transition(LookupState.FRESH_HIT, address)
                self._notify("on_cache_hit", address)
                self.logger.info(
                    "Serving property from cache",
                    extra={"cache_key": entry.key, "cached_at": entry.updated_at},
                )
                return PropertyLookupResult(
                    property=cached_property, cached=True, cached_at=entry.updated_at
                )

        self._transition(LookupState.STALE_OR_MISS, address)
        self._notify("on_cache_miss", address, entry is not None)

        self._transition(LookupState.FETCHING, address)
        start_time = time.monotonic()
        try:
            raw = await self.provider.fetch_by_address(address)
        except ClientError as e:
            classified = self._classify_provider_error(e, address)
            self._notify("on_fetch_error", classified.kind)
            self._transition(LookupState.FAILED, address)
            self.logger.warning(
                f"Property fetch failed: {e}",
                extra={"address": address, "kind": classified.kind},
            )
            if classified is e:
                raise
            raise classified from e
        except Exception:
            self._notify("on_fetch_error", "internal")
            self._transition(LookupState.FAILED, address)
            raise

        duration = time.monotonic() - start_time
        self._notify("on_fetch_success", address, duration)

        transformed = transform(raw, self.overrides)
        self._transition(LookupState.TRANSFORMED, address)

        self._transition(LookupState.PERSISTING, address)
        stored = await self.cache.put(address, transformed.to_payload())
        self._notify("on_cache_write", stored)
        if not stored:
            self.logger.warning(
                "Fetched property could not be cached; returning uncached result",
                extra={"address": address},
            )

        self._transition(LookupState.DONE, address)
        return PropertyLookupResult(property=transformed, cached=False, cached_at=None)

    @staticmethod
    def _classify_provider_error(error: ClientError, address: str) -> ClientError:
        """Map a provider failure onto the lookup error taxonomy."""
        if isinstance(
            error, (ClientConfigurationError, PropertyNotFoundError, ClientAuthenticationError)
        ):
            return error

        if isinstance(error, PropertyAPIError):
            if error.status_code == 404:
                return PropertyNotFoundError(
                    address, client_name=error.client_name, original_error=error
                )
            if error.status_code == 401:
                return ClientAuthenticationError(
                    "Provider rejected the configured API key",
                    client_name=error.client_name,
                    original_error=error,
                )
            return error

        return PropertyAPIError(
            f"Property provider failed: {error.message}",
            client_name=error.client_name,
            original_error=error,
        )
