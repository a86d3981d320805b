"""
RentCast API client implementation.
"""

import asyncio
import json
import time
from typing import Any, Dict, List, Optional

import aiohttp

from ..base.client import BaseClient
from ..base.interfaces import PropertyDataProvider
from ..base.exceptions import (
    ClientConfigurationError,
    ClientConnectionError,
    ClientError,
    ClientTimeoutError,
    PropertyNotFoundError,
    RentCastAPIError,
)
from .config import RentCastClientConfig


class RentCastClient(BaseClient, PropertyDataProvider):
    """RentCast API client for single-property record lookups."""

    def __init__(self, config: RentCastClientConfig):
        super().__init__(config, "RentCastClient")
        self.config: RentCastClientConfig = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def initialize(self) -> None:
        """Initialize RentCast API client."""
        if self._session is not None and not self._session.closed:
            self._initialized = True
            return

        timeout = aiohttp.ClientTimeout(
            total=self.config.timeout,
            connect=self.config.connect_timeout,
        )
        self._session = aiohttp.ClientSession(
            timeout=timeout,
            raise_for_status=False,  # Status codes are classified manually
        )
        self._initialized = True
        self.logger.info("RentCast API client initialized")

    async def close(self) -> None:
        """Close RentCast API client and clean up resources."""
        try:
            if self._session:
                await self._session.close()
                self._session = None

            self._initialized = False
            self.logger.info("RentCast API client closed")

        except Exception as e:
            self.logger.error(f"Error closing RentCast API client: {e}")
            raise ClientError(
                f"Error closing RentCast API client: {str(e)}",
                client_name=self.client_name,
                original_error=e,
            )

    async def health_check(self) -> Dict[str, Any]:
        """Report configuration status. Does not spend a paid provider call."""
        self._mark_health_checked()
        configured = self.config.has_credentials
        return {
            "status": "healthy" if configured else "misconfigured",
            "client_name": self.client_name,
            "initialized": self._initialized,
            "api_base_url": self.config.base_url,
            "api_key_configured": configured,
            "config": {
                "timeout": self.config.timeout,
                "connect_timeout": self.config.connect_timeout,
            },
        }

    async def fetch_by_address(self, address: str) -> Dict[str, Any]:
        """Fetch the single best-matching property record for an address.

        The address is sent exactly as given; cache-key normalization is not
        a provider concern.
        """
        if not self.config.has_credentials:
            self.logger.error("RentCast API key is not configured")
            raise ClientConfigurationError(
                "RENTCAST_API_KEY is not configured", client_name=self.client_name
            )

        if not self._initialized or self._session is None:
            await self.initialize()

        params = {"address": address, "limit": self.config.result_limit}
        url = self.config.properties_url

        if self.config.enable_request_logging:
            self.logger.debug(f"[fetch_by_address] GET {url}", extra={"address": address})

        start_time = time.time()

        try:
            async with self._session.get(
                url, headers=self.config.headers, params=params
            ) as response:
                duration = time.time() - start_time

                if response.status >= 400:
                    error_text = await response.text()
                    self.logger.warning(
                        f"RentCast API error ({response.status}) after {duration:.3f}s",
                        extra={"status_code": response.status, "details": error_text[:500]},
                    )
                    raise RentCastAPIError(
                        f"RentCast API error ({response.status}): {error_text[:500]}",
                        status_code=response.status,
                    )

                try:
                    response_data = await response.json()
                except (json.JSONDecodeError, aiohttp.ContentTypeError) as e:
                    raise RentCastAPIError(
                        f"Invalid JSON response from RentCast API: {str(e)}",
                        status_code=response.status,
                        original_error=e,
                    )

                if self.config.enable_response_logging:
                    self.logger.debug(
                        f"[fetch_by_address] Response received in {duration:.3f}s",
                        extra={"response": response_data},
                    )

        except asyncio.TimeoutError as e:
            duration = time.time() - start_time
            self.logger.error(f"[fetch_by_address] Request timed out after {duration:.3f}s")
            raise ClientTimeoutError(
                f"RentCast API request timed out after {duration:.3f}s",
                timeout_duration=duration,
                client_name=self.client_name,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            duration = time.time() - start_time
            self.logger.error(f"[fetch_by_address] Request failed after {duration:.3f}s: {e}")
            raise ClientConnectionError(
                f"RentCast API request failed: {str(e)}",
                client_name=self.client_name,
                original_error=e,
            )

        records = self._extract_records(response_data)
        if not records:
            raise PropertyNotFoundError(address, client_name=self.client_name)

        return records[0]

    @staticmethod
    def _is_property_record(candidate: Any) -> bool:
        return isinstance(candidate, dict) and bool(
            candidate.get("id") or candidate.get("formattedAddress")
        )

    @classmethod
    def _extract_records(cls, response_data: Any) -> List[Dict[str, Any]]:
        """Normalize the provider payload into a list of property records.

        ``/properties`` answers with a list; a bare object counts only when it
        carries a record identity, so error-shaped bodies are never cached.
        """
        if isinstance(response_data, list):
            return [r for r in response_data if cls._is_property_record(r)]
        if cls._is_property_record(response_data):
            return [response_data]
        return []
