"""
Configuration package for the DynamoDB backup system.
"""

from .loader import ConfigLoader
from .models import (
    AwsConfig,
    BackupRecord,
    BackupSystemConfig,
    ConcurrencyConfig,
    CreateResult,
    DeleteOutcome,
    ExpireResult,
    LoggingConfig,
    NamingConfig,
    RunSummary,
)

__all__ = [
    "AwsConfig",
    "BackupRecord",
    "BackupSystemConfig",
    "ConcurrencyConfig",
    "ConfigLoader",
    "CreateResult",
    "DeleteOutcome",
    "ExpireResult",
    "LoggingConfig",
    "NamingConfig",
    "RunSummary",
]
