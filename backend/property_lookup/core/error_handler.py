"""
Error handling for the property lookup API.

Maps classified lookup failures onto HTTP responses with user-facing
messages and a stable ``kind`` the frontend can switch on.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException

from property_lookup.clients.base.exceptions import ClientError

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Error categories for better organization and handling"""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    EXTERNAL_API = "upstream"
    DATABASE = "storage"
    SYSTEM = "internal"


class ErrorSeverity(str, Enum):
    """Error severity levels"""

    CRITICAL = "critical"  # Operator must intervene
    HIGH = "high"  # Request failed on our side
    MEDIUM = "medium"  # Request failed on the provider side
    LOW = "low"  # Caller input or expected absence


@dataclass
class ErrorContext:
    """Additional context for error handling"""

    operation: Optional[str] = None
    address: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class EnhancedError:
    """Classified error with user-facing message and HTTP status"""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    status_code: int
    user_message: str
    retry_eligible: bool = False
    technical_message: str = ""
    context: Optional[ErrorContext] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


_ERROR_TEMPLATES: Dict[ErrorCategory, Dict[str, Any]] = {
    ErrorCategory.VALIDATION: {
        "severity": ErrorSeverity.LOW,
        "code": "LOOKUP_400",
        "status_code": 400,
        "user_message": "Address is required",
    },
    ErrorCategory.CONFIGURATION: {
        "severity": ErrorSeverity.CRITICAL,
        "code": "LOOKUP_500_CONFIG",
        "status_code": 500,
        "user_message": "API configuration error",
    },
    ErrorCategory.NOT_FOUND: {
        "severity": ErrorSeverity.LOW,
        "code": "LOOKUP_404",
        "status_code": 404,
        "user_message": "Property not found at the specified address",
    },
    ErrorCategory.AUTHENTICATION: {
        "severity": ErrorSeverity.CRITICAL,
        "code": "LOOKUP_401",
        "status_code": 401,
        "user_message": "Invalid API key. Please check your RentCast API configuration.",
    },
    ErrorCategory.EXTERNAL_API: {
        "severity": ErrorSeverity.MEDIUM,
        "code": "LOOKUP_502",
        "status_code": 502,
        "user_message": "Failed to fetch property data. Please try again.",
        "retry_eligible": True,
    },
    ErrorCategory.SYSTEM: {
        "severity": ErrorSeverity.HIGH,
        "code": "LOOKUP_500",
        "status_code": 500,
        "user_message": "Internal server error",
    },
}


class ErrorHandler:
    """Centralized classification of lookup errors into HTTP responses"""

    def classify(
        self, error: Exception, context: Optional[ErrorContext] = None
    ) -> EnhancedError:
        category = ErrorCategory.SYSTEM
        if isinstance(error, ClientError):
            try:
                category = ErrorCategory(error.kind)
            except ValueError:
                category = ErrorCategory.SYSTEM
        if category == ErrorCategory.DATABASE:
            # Storage failures are absorbed by the cache layer; reaching here is a bug
            category = ErrorCategory.SYSTEM

        template = _ERROR_TEMPLATES[category]
        return EnhancedError(
            category=category,
            severity=template["severity"],
            code=template["code"],
            status_code=template["status_code"],
            user_message=template["user_message"],
            retry_eligible=template.get("retry_eligible", False),
            technical_message=f"{type(error).__name__}: {error}",
            context=context,
        )

    def handle_error(
        self, error: Exception, context: Optional[ErrorContext] = None
    ) -> HTTPException:
        enhanced_error = self.classify(error, context)
        self._log_error(enhanced_error, error)
        return self._create_http_exception(enhanced_error)

    def _log_error(self, enhanced_error: EnhancedError, original_error: Exception) -> None:
        log_data = {
            "error_code": enhanced_error.code,
            "category": enhanced_error.category.value,
            "severity": enhanced_error.severity.value,
            "technical_message": enhanced_error.technical_message,
        }
        if enhanced_error.context:
            log_data.update(
                {
                    "operation": enhanced_error.context.operation,
                    "address": enhanced_error.context.address,
                    "metadata": enhanced_error.context.metadata,
                }
            )

        if enhanced_error.severity == ErrorSeverity.CRITICAL:
            logger.critical("Lookup failed: server misconfigured", extra=log_data)
        elif enhanced_error.severity == ErrorSeverity.HIGH:
            logger.error(
                "Lookup failed: unexpected error", extra=log_data, exc_info=original_error
            )
        elif enhanced_error.severity == ErrorSeverity.MEDIUM:
            logger.warning("Lookup failed: provider error", extra=log_data)
        else:
            logger.info("Lookup rejected", extra=log_data)

    def _create_http_exception(self, enhanced_error: EnhancedError) -> HTTPException:
        detail = {
            "error": enhanced_error.user_message,
            "kind": enhanced_error.category.value,
            "error_code": enhanced_error.code,
            "retry_eligible": enhanced_error.retry_eligible,
            "timestamp": enhanced_error.timestamp.isoformat(),
        }
        return HTTPException(status_code=enhanced_error.status_code, detail=detail)


# Global error handler instance
error_handler = ErrorHandler()


def handle_api_error(error: Exception, context: Optional[ErrorContext] = None) -> HTTPException:
    """
    Convenience function to handle API errors
    Returns HTTP exception ready to be raised
    """
    return error_handler.handle_error(error, context)


def create_error_context(
    operation: Optional[str] = None, address: Optional[str] = None, **metadata
) -> ErrorContext:
    """Convenience function to create error context"""
    return ErrorContext(
        operation=operation,
        address=address,
        metadata=metadata if metadata else None,
    )
