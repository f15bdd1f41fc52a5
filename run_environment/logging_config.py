"""Structured logging configuration for run environment detection"""
import logging
import sys
from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog
from structlog.stdlib import LoggerFactory
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, StackInfoRenderer

if TYPE_CHECKING:
    from .config import Settings
    from .detection import DetectionResult


def setup_structured_logging(settings: 'Settings') -> None:
    """Setup structured logging with console output for development and JSON otherwise"""

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(JSONRenderer())
    else:
        processors.append(ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper())

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(settings.log_file))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=handlers,
        force=True
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Until ``setup_structured_logging`` runs, events are handed to the stdlib
    logger of the same name, so an application that never configures logging
    sees nothing below the stdlib's own threshold.
    """
    if structlog.is_configured():
        return structlog.get_logger(name)
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[structlog.stdlib.render_to_log_kwargs],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def log_detection(logger: structlog.stdlib.BoundLogger, result: 'DetectionResult') -> None:
    """Log a detection decision with structured data"""
    logger.debug(
        "Run environment detected",
        environment=str(result.environment),
        method=result.method,
        reason=result.reason,
        event_type="environment_detection"
    )


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception,
              context: Optional[Dict[str, Any]] = None) -> None:
    """Log error with structured context"""
    logger.error(
        "Error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        event_type="error",
        exc_info=True
    )
