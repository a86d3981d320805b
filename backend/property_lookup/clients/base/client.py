"""
Base client implementation for external service integrations.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """Base configuration for all external service clients."""

    # Connection settings
    timeout: int = 12
    connect_timeout: int = 5

    # Monitoring settings
    enable_logging: bool = True

    # Additional client-specific settings
    extra_config: Dict[str, Any] = field(default_factory=dict)


class BaseClient(ABC):
    """Abstract base class for all external service clients."""

    def __init__(self, config: ClientConfig, client_name: str = None):
        self.config = config
        self.client_name = client_name or self.__class__.__name__
        self._initialized = False
        self._last_health_check = 0.0
        self.logger = logging.getLogger(f"{__name__}.{self.client_name}")

    @property
    def is_initialized(self) -> bool:
        """Check if client is initialized."""
        return self._initialized

    @abstractmethod
    async def initialize(self) -> None:
        """Open network resources for the client."""

    @abstractmethod
    async def close(self) -> None:
        """Release network resources held by the client."""

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Report client health without side effects on the provider."""

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _mark_health_checked(self) -> None:
        self._last_health_check = time.time()

    @property
    def last_health_check(self) -> Optional[float]:
        return self._last_health_check or None
