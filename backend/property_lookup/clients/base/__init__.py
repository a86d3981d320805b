"""
Base classes shared by external service clients.
"""

from .client import BaseClient, ClientConfig
from .interfaces import PropertyDataProvider

__all__ = ["BaseClient", "ClientConfig", "PropertyDataProvider"]
