"""
Configuration management for the property lookup service
"""

from typing import Any, Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"
    debug: bool = False

    # Database
    database_url: Optional[str] = None
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_command_timeout: int = 60

    # Property cache
    cache_max_age_hours: float = 24
    cache_retention_days: int = 90

    # Field overrides applied after transformation, keyed by provider record id
    # or normalized address. Supplied as a JSON object in PROPERTY_OVERRIDES.
    property_overrides: Dict[str, Dict[str, Any]] = {}

    # Monitoring
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"

    # HTTP
    cors_origins: str = "*"

    @field_validator("cache_max_age_hours")
    @classmethod
    def validate_max_age(cls, v):
        if v <= 0:
            raise ValueError("cache_max_age_hours must be positive")
        return v

    @field_validator("cache_retention_days")
    @classmethod
    def validate_retention(cls, v):
        if v < 1:
            raise ValueError("cache_retention_days must be at least 1")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        v = v.lower()
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings singleton"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
