"""
Run context handed to every component of a backup run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from dynamodb_backups.audit.logger import get_logger
from dynamodb_backups.config.models import BackupSystemConfig
from dynamodb_backups.utils import utc_now


@dataclass(frozen=True)
class RunContext:
    """
    Store handle, settings and logger for one run.

    The store is used concurrently by every worker thread and must be safe
    for that; the boto3 client behind DynamoDBOperations is.
    """

    store: Any
    config: BackupSystemConfig
    logger: Any = field(default_factory=get_logger)
    clock: Callable[[], datetime] = utc_now
