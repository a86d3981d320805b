"""
Service-specific interfaces for external clients.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class PropertyDataProvider(ABC):
    """Abstract interface for a single-property lookup provider."""

    @abstractmethod
    async def fetch_by_address(self, address: str) -> Dict[str, Any]:
        """Fetch the best-matching raw property record for a free-text address.

        Raises:
            ClientConfigurationError: no credential is configured.
            PropertyNotFoundError: the provider returned zero records.
            PropertyAPIError: transport or HTTP failure (carries status_code).
        """
        pass
