"""
Structured logging for the DynamoDB backup system.

Log lines are rendered either as key/value text or as JSON, and every
line carries the service name so output from several jobs can be told
apart once shipped to a log aggregator.
"""

import logging
import sys
from typing import Optional

import structlog

from ..config.models import LoggingConfig

SERVICE_NAME = "dynamodb-backups"


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog from the logging configuration.

    Args:
        config: Logging configuration, defaults to INFO level text output
    """
    config = config or LoggingConfig()
    level = logging.getLevelName(config.level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    # Call-site details are only worth their cost when debugging.
    if level == logging.DEBUG:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )

    if config.format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


def get_logger(**fields):
    """Return a logger bound to the service name and any extra fields."""
    return structlog.get_logger().bind(service=SERVICE_NAME, **fields)
