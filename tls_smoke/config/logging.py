"""
Logging Configuration
====================

Structured logging configuration with environment-specific settings.
Uses structlog on top of the standard library handlers. Every record is a
single line on stdout; records bound to a ``component`` are prefixed with a
``[component]:`` tag, e.g. ``[server]: 200 /index.html``.
"""

import logging
import logging.config
import sys
from typing import Dict, Any, Optional, TYPE_CHECKING
import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings


SERVER_COMPONENT = "server"
BROWSER_COMPONENT = "playwright"

# Levels that stay implicit in console output
QUIET_LEVELS = ("debug", "info")


def add_component_tag(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Prefix the event with the bound component tag, then any level above info."""
    component = event_dict.pop("component", None)
    level = event_dict.pop("level", None)
    event = event_dict.get("event", "")
    if level and level not in QUIET_LEVELS:
        event = f"{level}: {event}"
    if component:
        event = f"[{component}]: {event}"
    event_dict["event"] = event
    return event_dict


def setup_logging(settings: Optional["Settings"] = None) -> None:
    """Setup application logging configuration."""
    settings = settings or get_settings()

    # Configure structlog
    processors: list[Processor] = [structlog.stdlib.filter_by_level]

    if settings.log_format == "json":
        processors.append(structlog.stdlib.add_logger_name)
    processors += [
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Console lines start with the tag
        processors.append(add_component_tag)
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging
    logging.config.dictConfig(get_logging_config(settings))


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "plain": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "plain",
                "stream": sys.stdout,
            },
            "library": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "standard",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "": {  # Root logger
                "level": settings.log_level,
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn": {
                "level": "WARNING",
                "handlers": ["library"],
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "WARNING",
                "handlers": ["library"],
                "propagate": False,
            },
            "playwright": {
                "level": "WARNING",
                "handlers": ["library"],
                "propagate": False,
            },
        },
    }


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
