"""
Client factory for dependency injection and client management.
"""

import logging
from typing import Any, Dict, Optional, Type

from .base.client import BaseClient
from .base.exceptions import ClientError
from .rentcast import RentCastClient, RentCastSettings

logger = logging.getLogger(__name__)


class ClientFactory:
    """Factory class for creating and managing external service clients."""

    def __init__(self):
        self._clients: Dict[str, BaseClient] = {}
        self._client_classes: Dict[str, Type[BaseClient]] = {
            "rentcast": RentCastClient,
        }
        self._config_classes: Dict[str, Type] = {
            "rentcast": RentCastSettings,
        }
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _load_config(self, client_name: str) -> Any:
        """Load configuration for a client."""
        if client_name not in self._config_classes:
            raise ClientError(
                f"No configuration class registered for client: {client_name}"
            )

        config_class = self._config_classes[client_name]

        try:
            settings = config_class()
            if hasattr(settings, "to_client_config"):
                return settings.to_client_config()
            return settings

        except Exception as e:
            self.logger.error(f"Failed to load configuration for {client_name}: {e}")
            raise ClientError(
                f"Failed to load configuration for {client_name}: {str(e)}",
                client_name=client_name,
                original_error=e,
            )

    def get_client(self, name: str, config: Any = None) -> BaseClient:
        """Get a client instance, creating it if necessary.

        An explicit ``config`` bypasses environment loading for the first
        construction of the named client.
        """
        if name not in self._clients:
            if name not in self._client_classes:
                raise ClientError(f"No client registered with name: {name}")

            if config is None:
                config = self._load_config(name)

            client_class = self._client_classes[name]
            self._clients[name] = client_class(config)
            self.logger.info(f"Created client instance: {name}")

        return self._clients[name]

    async def close_all(self) -> None:
        """Close all client connections."""
        for name in list(self._clients.keys()):
            try:
                await self._clients[name].close()
            except Exception as e:
                self.logger.error(f"Error closing client {name}: {e}")

        self._clients.clear()
        self.logger.info("All clients closed")


# Global factory instance
_client_factory: Optional[ClientFactory] = None


def get_client_factory() -> ClientFactory:
    """Get the global client factory instance."""
    global _client_factory
    if _client_factory is None:
        _client_factory = ClientFactory()
    return _client_factory


async def get_rentcast_client() -> RentCastClient:
    """Get initialized RentCast client."""
    client = get_client_factory().get_client("rentcast")
    if not client.is_initialized:
        await client.initialize()
    return client
