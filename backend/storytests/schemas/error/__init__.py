"""
Error schema package initialization.

Exports commonly used error response schemas for easy importing.
"""

from .responses import (
    ErrorResponse,
    ValidationErrorResponse,
    ExternalServiceErrorResponse,
    ErrorDetails,
    FieldError,
    ErrorSeverity,
)

__all__ = [
    "ErrorResponse",
    "ValidationErrorResponse",
    "ExternalServiceErrorResponse",
    "ErrorDetails",
    "FieldError",
    "ErrorSeverity",
]
