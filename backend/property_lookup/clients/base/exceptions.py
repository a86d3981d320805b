"""
Custom exceptions for the property data provider and the lookup flow.

Every exception carries a stable ``kind`` so the HTTP layer can pick a
status code without inspecting messages.
"""

from typing import Optional


class ClientError(Exception):
    """Base exception for all client-related errors."""

    kind = "internal"

    def __init__(self, message: str, client_name: str = None, original_error: Exception = None):
        self.message = message
        self.client_name = client_name
        self.original_error = original_error
        super().__init__(message)

    def __str__(self):
        error_msg = self.message
        if self.client_name:
            error_msg = f"[{self.client_name}] {error_msg}"
        if self.original_error:
            error_msg += f" (Original: {str(self.original_error)})"
        return error_msg


class ClientConfigurationError(ClientError):
    """Raised when the client is missing required configuration (e.g. API key)."""

    kind = "configuration"


class ClientAuthenticationError(ClientError):
    """Raised when the provider rejects the configured credential."""

    kind = "authentication"

    def __init__(self, message: str, status_code: int = 401, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


# Property-specific exceptions

class PropertyAPIError(ClientError):
    """Base exception for property provider failures (safe for the caller to retry)."""

    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)


class RentCastAPIError(PropertyAPIError):
    """Raised for RentCast API HTTP errors."""

    def __init__(self, message: str, status_code: int = None, **kwargs):
        kwargs.setdefault("client_name", "RentCast API")
        super().__init__(message, status_code=status_code, **kwargs)


class ClientConnectionError(PropertyAPIError):
    """Raised when the client cannot reach the external service."""
    pass


class ClientTimeoutError(ClientConnectionError):
    """Raised when a provider request times out."""

    def __init__(self, message: str, timeout_duration: float = None, **kwargs):
        self.timeout_duration = timeout_duration
        super().__init__(message, **kwargs)


class PropertyNotFoundError(ClientError):
    """Raised when property cannot be found."""

    kind = "not_found"

    def __init__(self, address: str, **kwargs):
        self.address = address
        message = f"Property not found: {address}"
        super().__init__(message, **kwargs)


class InvalidPropertyAddressError(ClientError):
    """Raised when the requested address is missing or blank."""

    kind = "validation"

    def __init__(self, address: Optional[str], reason: str = None, **kwargs):
        self.address = address
        self.reason = reason
        message = "Address is required"
        if reason:
            message += f" ({reason})"
        super().__init__(message, **kwargs)


class PropertyCacheError(ClientError):
    """Raised for property cache read/write failures. Never surfaced to callers."""

    kind = "storage"
