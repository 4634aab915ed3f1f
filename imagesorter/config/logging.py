"""
imagesorter - structlog configuration.

Usage:
    from imagesorter.config.logging import configure_logging

    # At startup (cli.main)
    configure_logging(level="INFO", json_format=False)

    # In modules
    import structlog
    logger = structlog.get_logger(__name__)
    logger.info("message", key=value)

Logs go to stderr: stdout is reserved for the interactive duplicate prompt.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger


def add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = "imagesorter"
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool = False,
    enable_colors: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog for imagesorter.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, JSON lines. If False, human readable console output
        enable_colors: Colorize console output (ignored for JSON)
        stream: Destination stream, stderr by default

    Example:
        >>> configure_logging(level="DEBUG", enable_colors=True)
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stderr,
        level=getattr(logging, level.upper()),
        force=True,
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=enable_colors))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
