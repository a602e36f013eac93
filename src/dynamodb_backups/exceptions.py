"""
Exceptions raised by the DynamoDB backup system.
"""


class DynamoDBBackupsError(Exception):
    """Base class for all errors raised by dynamodb_backups."""


class ConfigurationError(DynamoDBBackupsError):
    """Raised when the configuration is missing or invalid."""


class InvalidTablePatternError(DynamoDBBackupsError):
    """Raised when the table name pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid table pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class TableListingError(DynamoDBBackupsError):
    """Raised when table enumeration fails and strict listing is enabled."""

    def __init__(self, message: str, partial_tables=None):
        super().__init__(message)
        self.partial_tables = list(partial_tables or [])


class BackupNotFoundError(DynamoDBBackupsError):
    """Raised when a backup to delete no longer exists in the store."""

    def __init__(self, backup_arn: str):
        super().__init__(f"Backup not found: {backup_arn}")
        self.backup_arn = backup_arn


class TaskTimeoutError(DynamoDBBackupsError):
    """Raised when a task does not finish before the run deadline."""


class TaskCancelledError(DynamoDBBackupsError):
    """Raised when a task is skipped because the run was cancelled."""
