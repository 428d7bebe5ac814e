"""Structured logging configuration for the metrics forwarder exporter"""
import logging
import os
import sys
from typing import Any, Dict
import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer


def setup_structured_logging(options) -> None:
    """Setup structured logging with JSON format for production and console for development.

    ``options`` is a ``config.Options``; only ``log_level`` and ``log_file`` are read.
    """
    level = getattr(logging, str(options.log_level).upper())

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # Use JSON renderer for production, console for development
    is_development = os.getenv("ENVIRONMENT", "production").lower() == "development"
    if is_development:
        processors.append(ConsoleRenderer())
    else:
        processors.append(JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if options.log_file:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(options.log_file))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
        force=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance"""
    return structlog.get_logger(name)


def log_export_cycle(logger: structlog.stdlib.BoundLogger, points_count: int, export_time: float, success: bool) -> None:
    """Log the outcome of one export cycle"""
    logger.info(
        "Metrics export cycle completed",
        points_count=points_count,
        export_time_seconds=round(export_time, 3),
        success=success,
        event_type="export_cycle"
    )


def log_exporter_startup(logger: structlog.stdlib.BoundLogger, config) -> None:
    """Log exporter startup with resolved configuration (token excluded)"""
    logger.info(
        "Metrics exporter starting up",
        url=config.url,
        app_guid=config.app_guid,
        instance_id=config.instance_id,
        instance_index=config.instance_index,
        frequency_seconds=config.frequency,
        time_unit_ns=config.time_unit,
        skip_ssl_verification=config.skip_ssl_verification,
        event_type="exporter_startup"
    )


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception, context: Dict[str, Any] = None) -> None:
    """Log error with structured context"""
    logger.error(
        "Error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        event_type="error",
        exc_info=True
    )
