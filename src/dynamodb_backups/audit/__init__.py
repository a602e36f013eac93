"""
Logging helpers for the DynamoDB backup system.
"""

from .logger import SERVICE_NAME, configure_logging, get_logger

__all__ = [
    "SERVICE_NAME",
    "configure_logging",
    "get_logger",
]
