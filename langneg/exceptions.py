"""
Custom Exception Classes for the language negotiation service

Negotiation itself never raises: drift, missing callbacks and unknown
langcodes all fall through to the default language.  These exceptions are
for administrative operations (reordering methods, editing URL settings)
and the HTTP surface.
"""

from typing import Any

from fastapi import status


class LanguageNegotiationError(Exception):
    """Base exception class for all language negotiation exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(LanguageNegotiationError):
    """Base class for resource not found errors"""

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class UnknownLanguageTypeError(ResourceNotFoundError):
    """Raised when a language type is not defined by any plugin"""

    def __init__(self, type_id: str | None = None):
        super().__init__(resource_type="Language type", resource_id=type_id)


class UnknownMethodError(ResourceNotFoundError):
    """Raised when a negotiation method is not registered"""

    def __init__(self, method_id: str | None = None):
        super().__init__(resource_type="Negotiation method", resource_id=method_id)


# ============================================================================
# Validation & Configuration Exceptions
# ============================================================================


class ValidationError(LanguageNegotiationError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class ConfigurationError(LanguageNegotiationError):
    """Raised when stored negotiation configuration cannot be written"""

    def __init__(self, message: str = "Negotiation configuration error", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
