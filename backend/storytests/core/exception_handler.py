"""
Global exception handler for the User Story to Tests service.

Every error leaving the API is rendered as the same ErrorResponse envelope,
tagged with the request's correlation id. Field-level problems, whether in
the caller's request or in the model's output, are reported as FieldError
entries under details.field_errors.
"""

import traceback
from typing import Any, Dict, List, Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from storytests.core.exceptions import (
    BaseStoryTestsException,
    ErrorCode,
    ErrorCategory,
)
from storytests.schemas.error import (
    ErrorResponse,
    ValidationErrorResponse,
    ExternalServiceErrorResponse,
    ErrorDetails,
    FieldError,
    ErrorSeverity,
)
from storytests.utils.correlation import CorrelationIdManager, get_correlation_logger


def _request_context(request: Request) -> Dict[str, str]:
    return {
        "method": request.method,
        "path": request.url.path,
        "url": str(request.url),
    }


class GlobalExceptionHandler:
    """
    Global exception handler that logs every failure and converts it into
    the standard error envelope.
    """

    def __init__(self):
        self.logger = get_correlation_logger(__name__)

    async def handle_base_exception(
        self,
        request: Request,
        exc: BaseStoryTestsException
    ) -> JSONResponse:
        """Handle custom application exceptions."""

        self._log_exception(request, exc)

        response_cls = ErrorResponse
        if exc.category == ErrorCategory.EXTERNAL_SERVICE_ERROR:
            response_cls = ExternalServiceErrorResponse

        error_response = response_cls(
            error_code=exc.error_code,
            category=exc.category,
            message=exc.user_message,
            details=self._create_error_details(exc),
            request_id=CorrelationIdManager.get_correlation_id(),
            severity=self._get_error_severity(exc)
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json")
        )

    async def handle_validation_error(
        self,
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors as 400s."""

        field_errors = []
        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"] if loc != "body")
            field_errors.append(FieldError(
                field=field_path or "body",
                message=error["msg"],
                code=error["type"],
                value=_json_safe(error.get("input"))
            ))

        self.logger.warning(
            "Request validation failed",
            request=_request_context(request),
            validation_errors=[err.model_dump() for err in field_errors],
            event_type="validation_error"
        )

        error_response = ValidationErrorResponse(
            message="Request validation failed",
            details=ErrorDetails(field_errors=field_errors),
            request_id=CorrelationIdManager.get_correlation_id()
        )

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_response.model_dump(mode="json")
        )

    async def handle_http_exception(
        self,
        request: Request,
        exc: HTTPException
    ) -> JSONResponse:
        """Handle FastAPI HTTP exceptions (unknown routes, wrong methods)."""

        category_mapping = {
            400: ErrorCategory.CLIENT_ERROR,
            401: ErrorCategory.AUTHENTICATION_ERROR,
            404: ErrorCategory.NOT_FOUND_ERROR,
            405: ErrorCategory.CLIENT_ERROR,
            500: ErrorCategory.SERVER_ERROR,
        }

        error_code = ErrorCode.VALIDATION_ERROR if exc.status_code < 500 else ErrorCode.INTERNAL_SERVER_ERROR
        default_category = (
            ErrorCategory.CLIENT_ERROR if exc.status_code < 500 else ErrorCategory.SERVER_ERROR
        )
        category = category_mapping.get(exc.status_code, default_category)

        log_method = self.logger.error if exc.status_code >= 500 else self.logger.warning
        log_method(
            "HTTP exception occurred",
            request=_request_context(request),
            error={
                "status_code": exc.status_code,
                "detail": exc.detail,
                "error_code": error_code.value
            },
            event_type="http_exception"
        )

        error_response = ErrorResponse(
            error_code=error_code,
            category=category,
            message=str(exc.detail),
            details=ErrorDetails(
                additional_context={"status_code": exc.status_code}
            ),
            request_id=CorrelationIdManager.get_correlation_id(),
            severity=ErrorSeverity.HIGH if exc.status_code >= 500 else ErrorSeverity.LOW
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=error_response.model_dump(mode="json"),
            headers=getattr(exc, "headers", None)
        )

    async def handle_general_exception(
        self,
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions without exposing internals."""

        self.logger.error(
            "Unhandled exception occurred",
            request=_request_context(request),
            error={
                "type": type(exc).__name__,
                "message": str(exc),
                "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            },
            event_type="unhandled_exception"
        )

        error_response = ErrorResponse(
            error_code=ErrorCode.INTERNAL_SERVER_ERROR,
            category=ErrorCategory.SERVER_ERROR,
            message="An internal error occurred. Please try again later.",
            request_id=CorrelationIdManager.get_correlation_id(),
            severity=ErrorSeverity.CRITICAL
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response.model_dump(mode="json")
        )

    def _log_exception(self, request: Request, exc: BaseStoryTestsException) -> None:
        """Log exception with a level chosen from its category."""

        if exc.category in [ErrorCategory.SERVER_ERROR, ErrorCategory.EXTERNAL_SERVICE_ERROR]:
            log_method = self.logger.error
        elif exc.category in [ErrorCategory.VALIDATION_ERROR, ErrorCategory.CLIENT_ERROR]:
            log_method = self.logger.info
        else:
            log_method = self.logger.warning

        log_context = {
            "request": _request_context(request),
            "error": {
                "code": exc.error_code.value,
                "category": exc.category.value,
                "message": exc.message,
                "user_message": exc.user_message,
                "status_code": exc.status_code,
                "details": exc.details
            },
            "event_type": "application_exception"
        }

        if exc.cause:
            log_context["error"]["cause"] = {
                "type": type(exc.cause).__name__,
                "message": str(exc.cause)
            }

        log_method(
            f"Application exception: {exc.error_code.value}",
            **log_context
        )

    def _create_error_details(self, exc: BaseStoryTestsException) -> Optional[ErrorDetails]:
        """Split exception details into field errors, service name and free-form context."""

        details = dict(exc.details)
        field_errors = self._field_errors(details.pop("field_errors", None))
        external_service = details.pop("service_name", None)

        if exc.cause:
            details["cause"] = type(exc.cause).__name__

        if not field_errors and not external_service and not details:
            return None

        return ErrorDetails(
            field_errors=field_errors or None,
            external_service=external_service,
            additional_context=details or None
        )

    @staticmethod
    def _field_errors(raw: Optional[List[Dict[str, Any]]]) -> List[FieldError]:
        if not raw:
            return []
        return [
            FieldError(
                field=item.get("path") or item.get("field") or "(root)",
                message=item.get("message", ""),
                code=item.get("code", "invalid"),
                value=_json_safe(item.get("value"))
            )
            for item in raw
        ]

    def _get_error_severity(self, exc: BaseStoryTestsException) -> ErrorSeverity:
        """Determine error severity based on exception code and category."""

        if exc.error_code in [
            ErrorCode.INTERNAL_SERVER_ERROR,
            ErrorCode.CONFIGURATION_ERROR
        ]:
            return ErrorSeverity.CRITICAL

        if exc.category in [
            ErrorCategory.SERVER_ERROR,
            ErrorCategory.EXTERNAL_SERVICE_ERROR,
            ErrorCategory.AUTHENTICATION_ERROR
        ]:
            return ErrorSeverity.HIGH

        if exc.category == ErrorCategory.VALIDATION_ERROR:
            return ErrorSeverity.MEDIUM

        return ErrorSeverity.LOW


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool, list, dict)):
        return value
    return str(value)


# Global exception handler instance
exception_handler = GlobalExceptionHandler()


async def base_exception_handler(request: Request, exc: BaseStoryTestsException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return await exception_handler.handle_base_exception(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for FastAPI validation errors."""
    return await exception_handler.handle_validation_error(request, exc)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTP exceptions."""
    return await exception_handler.handle_http_exception(request, exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unexpected exceptions."""
    return await exception_handler.handle_general_exception(request, exc)


# Dictionary mapping exception types to handlers
EXCEPTION_HANDLERS = {
    BaseStoryTestsException: base_exception_handler,
    RequestValidationError: validation_exception_handler,
    HTTPException: http_exception_handler,
    Exception: general_exception_handler,
}
