"""
Custom exception classes for the User Story to Tests service.

This module defines a hierarchy of custom exceptions with proper
error categorization, codes, and metadata for enhanced error handling.
Each generation failure mode maps to its own error code so that callers
can tell a broken model call apart from a model that answered with
unusable content.
"""

from typing import Any, Dict, Optional, List
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the application."""

    # General application errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Issue tracker errors
    ISSUE_TRACKER_ERROR = "ISSUE_TRACKER_ERROR"
    ISSUE_NOT_FOUND = "ISSUE_NOT_FOUND"
    ISSUE_TRACKER_UNAUTHORIZED = "ISSUE_TRACKER_UNAUTHORIZED"

    # Test generation errors
    GENERATION_SERVICE_ERROR = "GENERATION_SERVICE_ERROR"
    MALFORMED_MODEL_OUTPUT = "MALFORMED_MODEL_OUTPUT"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"


class ErrorCategory(str, Enum):
    """Error categories for grouping and handling errors."""

    CLIENT_ERROR = "client_error"  # 4xx errors
    SERVER_ERROR = "server_error"  # 5xx errors
    VALIDATION_ERROR = "validation_error"  # 400 errors
    AUTHENTICATION_ERROR = "authentication_error"  # 401 errors
    NOT_FOUND_ERROR = "not_found_error"  # 404 errors
    EXTERNAL_SERVICE_ERROR = "external_service_error"  # External dependencies


class BaseStoryTestsException(Exception):
    """
    Base exception class for all User Story to Tests exceptions.

    Provides standard structure for error handling including error codes,
    categories, HTTP status codes, and additional context.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        category: ErrorCategory,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None,
    ):
        """
        Initialize the base exception.

        Args:
            message: Technical error message for logging
            error_code: Standardized error code
            category: Error category for handling
            status_code: HTTP status code
            details: Additional error context
            cause: Original exception that caused this error
            user_message: User-friendly error message
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.status_code = status_code
        self.details = details or {}
        self.cause = cause
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        """Get default user-friendly message based on category."""
        category_messages = {
            ErrorCategory.CLIENT_ERROR: "Invalid request. Please check your input and try again.",
            ErrorCategory.SERVER_ERROR: "An internal error occurred. Please try again later.",
            ErrorCategory.VALIDATION_ERROR: "The provided data is invalid. Please check and correct your input.",
            ErrorCategory.AUTHENTICATION_ERROR: "Authentication failed. Please check your credentials.",
            ErrorCategory.NOT_FOUND_ERROR: "The requested resource was not found.",
            ErrorCategory.EXTERNAL_SERVICE_ERROR: "An external service is temporarily unavailable. Please try again later.",
        }
        return category_messages.get(self.category, "An error occurred. Please try again.")

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code.value,
            "category": self.category.value,
            "message": self.user_message,
            "details": self.details,
        }

    def __str__(self) -> str:
        """String representation for logging."""
        return f"{self.error_code.value}: {self.message}"


# Configuration Exceptions
class ConfigurationException(BaseStoryTestsException):
    """Exception for configuration errors."""

    def __init__(self, config_key: str, message: str, **kwargs):
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=f"Configuration error for '{config_key}': {message}",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            category=ErrorCategory.SERVER_ERROR,
            status_code=500,
            details={"config_key": config_key},
            **kwargs
        )


# Issue Tracker Exceptions
class IssueTrackerException(BaseStoryTestsException):
    """Exception for failures talking to the issue tracker."""

    def __init__(
        self,
        message: str = "Failed to fetch Jira issue",
        issue_id: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.ISSUE_TRACKER_ERROR,
        category: ErrorCategory = ErrorCategory.EXTERNAL_SERVICE_ERROR,
        status_code: int = 502,
        **kwargs
    ):
        kwargs.setdefault("user_message", message)
        super().__init__(
            message=message,
            error_code=error_code,
            category=category,
            status_code=status_code,
            details={"service_name": "Jira", "issue_id": issue_id},
            **kwargs
        )
        self.issue_id = issue_id


class IssueNotFoundException(IssueTrackerException):
    """Exception for an issue id the tracker does not know."""

    def __init__(self, issue_id: str, **kwargs):
        super().__init__(
            message="Issue not found",
            issue_id=issue_id,
            error_code=ErrorCode.ISSUE_NOT_FOUND,
            category=ErrorCategory.NOT_FOUND_ERROR,
            status_code=404,
            **kwargs
        )


class IssueTrackerAuthException(IssueTrackerException):
    """Exception for rejected issue tracker credentials."""

    def __init__(self, issue_id: Optional[str] = None, **kwargs):
        super().__init__(
            message="Unauthorized when contacting Jira. Check credentials",
            issue_id=issue_id,
            error_code=ErrorCode.ISSUE_TRACKER_UNAUTHORIZED,
            category=ErrorCategory.AUTHENTICATION_ERROR,
            status_code=401,
            **kwargs
        )


class IssueTrackerNotConfiguredException(IssueTrackerException):
    """Exception raised when the Jira settings are incomplete."""

    def __init__(self, **kwargs):
        super().__init__(
            message=(
                "Jira is not configured on the server. Please set JIRA_BASE_URL, "
                "JIRA_EMAIL, and JIRA_API_TOKEN in the server environment."
            ),
            error_code=ErrorCode.CONFIGURATION_ERROR,
            category=ErrorCategory.SERVER_ERROR,
            status_code=500,
            **kwargs
        )


# Test Generation Exceptions
class GenerationServiceException(BaseStoryTestsException):
    """Exception for network, HTTP or payload failures of the generation service call."""

    def __init__(self, message: str = "Generation service call failed", **kwargs):
        kwargs.setdefault("user_message", "Failed to generate tests from LLM service")
        super().__init__(
            message=message,
            error_code=ErrorCode.GENERATION_SERVICE_ERROR,
            category=ErrorCategory.EXTERNAL_SERVICE_ERROR,
            status_code=502,
            details={"service_name": "generation"},
            **kwargs
        )


class MalformedModelOutputException(BaseStoryTestsException):
    """Exception for model output that is not parseable JSON."""

    def __init__(self, message: str, raw_response: Optional[str] = None, **kwargs):
        kwargs.setdefault("user_message", "LLM returned invalid JSON format")
        super().__init__(
            message=message,
            error_code=ErrorCode.MALFORMED_MODEL_OUTPUT,
            category=ErrorCategory.EXTERNAL_SERVICE_ERROR,
            status_code=502,
            **kwargs
        )
        self.raw_response = raw_response


class SchemaMismatchException(BaseStoryTestsException):
    """Exception for parseable model output that violates the response contract."""

    def __init__(self, violations: List[Dict[str, Any]], **kwargs):
        kwargs.setdefault("user_message", "LLM response does not match expected schema")
        super().__init__(
            message=f"Model output failed schema validation with {len(violations)} violation(s)",
            error_code=ErrorCode.SCHEMA_MISMATCH,
            category=ErrorCategory.EXTERNAL_SERVICE_ERROR,
            status_code=502,
            details={"field_errors": violations},
            **kwargs
        )
        self.violations = violations
