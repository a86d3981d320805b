"""
Configuration for RentCast API client.
"""

from dataclasses import dataclass
from typing import Dict

from ..base.client import ClientConfig
from ..base.exceptions import ClientConfigurationError


@dataclass
class RentCastClientConfig(ClientConfig):
    """Configuration for RentCast API client."""

    # RentCast API Configuration
    api_key: str = ""

    # API Endpoints
    base_url: str = "https://api.rentcast.io/v1"
    properties_endpoint: str = "properties"

    # Request settings
    timeout: int = 12
    connect_timeout: int = 5

    # Single best-match lookups only
    result_limit: int = 1

    # Monitoring and debugging
    enable_request_logging: bool = True
    enable_response_logging: bool = False  # Disable by default due to size

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def properties_url(self) -> str:
        """Get full URL of the property records endpoint."""
        return f"{self.base_url.rstrip('/')}/{self.properties_endpoint.lstrip('/')}"

    @property
    def headers(self) -> Dict[str, str]:
        """Get default request headers."""
        return {
            "X-Api-Key": self.api_key.strip(),
            "Accept": "application/json",
        }

    def validate_config(self) -> None:
        """Validate configuration settings."""
        if not self.has_credentials:
            raise ClientConfigurationError(
                "RENTCAST_API_KEY is not configured", client_name="RentCast API"
            )

        if not self.base_url.startswith(("http://", "https://")):
            raise ClientConfigurationError(
                f"Invalid RentCast base URL: {self.base_url}", client_name="RentCast API"
            )

        if self.timeout <= 0:
            raise ClientConfigurationError(
                "Timeout must be positive", client_name="RentCast API"
            )
