"""
Logging configuration for the User Story to Tests service.

This module sets up structured logging with proper formatting,
context binding, correlation tracking, and output configuration.
"""

import sys
import os
import logging
import logging.handlers
from datetime import datetime
from typing import Optional

import structlog
from pythonjsonlogger import jsonlogger

from storytests.core.config import Settings, settings as default_settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structured logging for the application.

    Sets up structlog with appropriate processors and formatters
    based on the configured log format and level.
    """
    settings = settings or default_settings

    log_level = getattr(logging, settings.LOG_LEVEL.upper())

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]

    if settings.LOG_FORMAT.lower() == "json":
        processors = shared_processors + [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            AppContextProcessor(settings),
            structlog.processors.JSONRenderer()
        ]

        formatter = CorrelationJSONFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S"
        )
    else:
        # Human-readable format for development
        processors = shared_processors + [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=True)
        ]

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_dir = os.path.dirname(settings.LOG_FILE)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=settings.LOG_FILE,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    configure_third_party_loggers(log_level)

    structlog.get_logger(__name__).info(
        "Logging system initialized",
        log_level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
        log_file=settings.LOG_FILE,
        environment=settings.ENVIRONMENT
    )


def configure_third_party_loggers(log_level: int) -> None:
    """
    Configure third-party library loggers.

    Args:
        log_level: The log level to set
    """
    noisy_loggers = [
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "httpcore",
        "openai",
        "asyncio",
        "multipart",
    ]

    for logger_name in noisy_loggers:
        logger = logging.getLogger(logger_name)
        # WARNING unless we're in DEBUG mode
        if log_level == logging.DEBUG:
            logger.setLevel(logging.INFO)
        else:
            logger.setLevel(logging.WARNING)


class AppContextProcessor:
    """structlog processor that stamps application metadata on every event."""

    def __init__(self, settings: Settings):
        self.app_name = settings.APP_NAME
        self.app_version = settings.APP_VERSION
        self.environment = settings.ENVIRONMENT

    def __call__(self, logger, name, event_dict):
        event_dict["app_name"] = self.app_name
        event_dict["app_version"] = self.app_version
        event_dict["environment"] = self.environment
        return event_dict


class CorrelationJSONFormatter(jsonlogger.JsonFormatter):
    """JSON formatter for stdlib records that carries the correlation id along."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            log_record["correlation_id"] = correlation_id

        log_record["process_id"] = record.process

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.utcnow().isoformat()
