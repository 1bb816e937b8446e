"""
Error response schemas for the User Story to Tests API.

This module defines Pydantic models for standardized error responses
across all API endpoints with proper validation and documentation.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum

from storytests.core.exceptions import ErrorCode, ErrorCategory


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FieldError(BaseModel):
    """Schema for one field-level violation."""

    field: str = Field(..., description="Dotted path of the offending field")
    message: str = Field(..., description="Human-readable reason")
    code: str = Field(..., description="Machine-readable violation type")
    value: Optional[Any] = Field(None, description="The invalid value that caused the error")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "field": "categories",
            "message": "List should have at least 1 item after validation, not 0",
            "code": "too_short",
            "value": []
        }
    })


class ErrorDetails(BaseModel):
    """Schema for additional error details and context."""

    field_errors: Optional[List[FieldError]] = Field(None, description="List of field-specific errors")
    external_service: Optional[str] = Field(None, description="Name of external service that failed")
    additional_context: Optional[Dict[str, Any]] = Field(None, description="Additional context information")


class ErrorResponse(BaseModel):
    """Standard error response schema for all API endpoints."""

    success: bool = Field(False, description="Always false for error responses")
    error_code: ErrorCode = Field(..., description="Standardized error code")
    category: ErrorCategory = Field(..., description="Error category for client handling")
    message: str = Field(..., description="User-friendly error message")
    details: Optional[ErrorDetails] = Field(None, description="Additional error details and context")
    request_id: Optional[str] = Field(None, description="Unique request identifier for tracking")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Timestamp when error occurred")
    severity: ErrorSeverity = Field(ErrorSeverity.MEDIUM, description="Error severity level")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "success": False,
            "error_code": "SCHEMA_MISMATCH",
            "category": "external_service_error",
            "message": "LLM response does not match expected schema",
            "details": {
                "field_errors": [
                    {
                        "field": "cases.0.BDD.given",
                        "message": "Field required",
                        "code": "missing",
                        "value": None
                    }
                ]
            },
            "request_id": "0b6c9c7e-3f0e-4c1e-9f43-1b1e0f3b6a55",
            "timestamp": "2025-01-15T10:30:00Z",
            "severity": "high"
        }
    })


class ValidationErrorResponse(ErrorResponse):
    """Specialized error response for validation errors."""

    error_code: ErrorCode = Field(ErrorCode.VALIDATION_ERROR, description="Always validation error")
    category: ErrorCategory = Field(ErrorCategory.VALIDATION_ERROR, description="Always validation error category")
    details: ErrorDetails = Field(..., description="Must include field errors for validation failures")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "success": False,
            "error_code": "VALIDATION_ERROR",
            "category": "validation_error",
            "message": "Request validation failed",
            "details": {
                "field_errors": [
                    {
                        "field": "storyTitle",
                        "message": "Value error, Story title is required",
                        "code": "value_error",
                        "value": "   "
                    }
                ]
            },
            "request_id": "req_987654321",
            "timestamp": "2025-01-15T10:30:00Z",
            "severity": "medium"
        }
    })


class ExternalServiceErrorResponse(ErrorResponse):
    """Specialized error response for generation service and issue tracker errors."""

    category: ErrorCategory = Field(ErrorCategory.EXTERNAL_SERVICE_ERROR, description="External service error category")
