"""
Correlation ID utilities for request tracking.

This module provides utilities for generating, managing, and tracking
correlation IDs across the entire request lifecycle.
"""

import uuid
import contextvars
from typing import Optional, Dict, Any
from starlette.requests import Request
from starlette.responses import Response
import structlog

# Context variable for storing correlation ID
correlation_id_context: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)


class CorrelationIdManager:
    """Manages correlation IDs throughout the request lifecycle."""

    HEADER_NAME = "X-Correlation-ID"
    REQUEST_ID_HEADER = "X-Request-ID"

    @staticmethod
    def generate() -> str:
        """Generate a new correlation ID."""
        return str(uuid.uuid4())

    @classmethod
    def get_correlation_id(cls) -> Optional[str]:
        """Get the current correlation ID from context."""
        return correlation_id_context.get()

    @classmethod
    def set_correlation_id(cls, correlation_id: Optional[str]) -> contextvars.Token:
        """Set the correlation ID in context and bind it for structlog."""
        token = correlation_id_context.set(correlation_id)
        if correlation_id:
            structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
        return token

    @classmethod
    def reset(cls, token: contextvars.Token) -> None:
        correlation_id_context.reset(token)

    @classmethod
    def extract_from_request(cls, request: Request) -> str:
        """
        Extract correlation ID from request headers or generate a new one.

        Args:
            request: Incoming request

        Returns:
            str: Correlation ID
        """
        correlation_id = request.headers.get(cls.HEADER_NAME)

        if not correlation_id:
            correlation_id = request.headers.get(cls.REQUEST_ID_HEADER)

        if not correlation_id:
            correlation_id = cls.generate()

        return correlation_id

    @classmethod
    def add_to_response(cls, response: Response, correlation_id: str) -> None:
        """
        Add correlation ID to response headers.

        Args:
            response: Outgoing response
            correlation_id: Correlation ID to add
        """
        response.headers[cls.HEADER_NAME] = correlation_id
        response.headers[cls.REQUEST_ID_HEADER] = correlation_id


class CorrelationLogger:
    """Logger that automatically includes correlation ID in all log entries."""

    def __init__(self, logger_name: str):
        self.logger = structlog.get_logger(logger_name)

    def _get_context(self, **kwargs) -> Dict[str, Any]:
        context = kwargs.copy()

        correlation_id = CorrelationIdManager.get_correlation_id()
        if correlation_id:
            context["correlation_id"] = correlation_id

        return context

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **self._get_context(**kwargs))

    def info(self, message: str, **kwargs) -> None:
        self.logger.info(message, **self._get_context(**kwargs))

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **self._get_context(**kwargs))

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **self._get_context(**kwargs))


def get_correlation_logger(name: str) -> CorrelationLogger:
    """
    Get a correlation-aware logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        CorrelationLogger: Logger instance that includes correlation ID
    """
    return CorrelationLogger(name)
