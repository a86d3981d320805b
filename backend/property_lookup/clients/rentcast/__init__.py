"""
RentCast API client.
"""

from .client import RentCastClient
from .config import RentCastClientConfig
from .settings import RentCastSettings

__all__ = ["RentCastClient", "RentCastClientConfig", "RentCastSettings"]
