"""
Settings for RentCast API client using Pydantic.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import RentCastClientConfig


class RentCastSettings(BaseSettings):
    """RentCast API client settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    rentcast_api_key: Optional[str] = Field(None)
    rentcast_api_url: str = Field("https://api.rentcast.io/v1")

    # Request settings
    rentcast_timeout: int = Field(12)
    rentcast_connect_timeout: int = Field(5)

    # Logging
    rentcast_enable_request_logging: bool = Field(True)
    rentcast_enable_response_logging: bool = Field(False)

    @field_validator("rentcast_api_url")
    @classmethod
    def validate_api_url(cls, v):
        """Strip trailing slashes so endpoints join cleanly."""
        return v.rstrip("/")

    @field_validator("rentcast_timeout", "rentcast_connect_timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    def to_client_config(self) -> RentCastClientConfig:
        """Convert settings to RentCast client configuration."""
        return RentCastClientConfig(
            api_key=(self.rentcast_api_key or "").strip(),
            base_url=self.rentcast_api_url,
            timeout=self.rentcast_timeout,
            connect_timeout=self.rentcast_connect_timeout,
            enable_request_logging=self.rentcast_enable_request_logging,
            enable_response_logging=self.rentcast_enable_response_logging,
        )
