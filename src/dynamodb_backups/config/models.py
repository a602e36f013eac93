"""
Configuration models for the DynamoDB backup system using Pydantic.

This module defines the configuration models that validate and parse
the YAML configuration file and the environment overrides, and the
result models produced by a backup run.
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LEGACY_TIMESTAMP_FORMAT = "%Y%m%d%M%S"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# LOG_LEVEL values understood by deployments configured for logrus.
LOGRUS_LEVEL_ALIASES = {
    "TRACE": "DEBUG",
    "WARN": "WARNING",
    "FATAL": "CRITICAL",
    "PANIC": "CRITICAL",
}


class NamingConfig(BaseModel):
    """Configuration for generated backup names."""

    # Backups taken by older releases were named without the hour field.
    include_hour: bool = True

    @property
    def timestamp_format(self) -> str:
        """strftime format used for the backup name suffix."""
        return TIMESTAMP_FORMAT if self.include_hour else LEGACY_TIMESTAMP_FORMAT


class ConcurrencyConfig(BaseModel):
    """Configuration for concurrency settings."""

    max_workers: int = Field(default=8, ge=1, le=64)
    max_delete_workers: int = Field(default=8, ge=1, le=64)
    timeout_seconds: float = Field(default=3600, gt=0)


class AwsConfig(BaseModel):
    """Configuration for the DynamoDB client."""

    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    connect_timeout: float = Field(default=10, gt=0)
    read_timeout: float = Field(default=60, gt=0)
    max_pool_connections: int = Field(default=20, ge=1)


class LoggingConfig(BaseModel):
    """Configuration for logging settings."""

    level: str = Field(default="INFO")
    format: str = Field(default="text")  # "text" or "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate logging level, accepting logrus level names too."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = LOGRUS_LEVEL_ALIASES.get(v.upper(), v.upper())
        if v not in valid_levels:
            raise ValueError(
                f"Invalid logging level: {v}. Must be one of {valid_levels}"
            )
        return v

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        """Validate logging format."""
        valid_formats = ["text", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(
                f"Invalid logging format: {v}. Must be one of {valid_formats}"
            )
        return v.lower()


class BackupSystemConfig(BaseModel):
    """Root configuration model for the backup system."""

    table_regex: str = Field(min_length=1)
    backup_expire_days: int = Field(default=1, ge=0)
    strict_listing: bool = False
    naming: NamingConfig = Field(default_factory=NamingConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    aws: AwsConfig = Field(default_factory=AwsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("table_regex")
    @classmethod
    def validate_table_regex(cls, v):
        """Ensure the table pattern compiles."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid table_regex {v!r}: {e}") from e
        return v


# Result models are frozen: a result is never mutated once its task returns it.


class BackupRecord(BaseModel):
    """An existing backup as reported by the store."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    backup_name: str
    created_at: datetime
    backup_arn: str

    @field_validator("created_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so they compare with the cutoff."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class TaskResult(BaseModel):
    """Common fields of every task result."""

    model_config = ConfigDict(frozen=True)

    table_name: str
    error_message: Optional[str] = None

    @property
    def status(self) -> str:
        return "failed" if self.error_message else "success"

    @property
    def success(self) -> bool:
        return self.error_message is None


class CreateResult(TaskResult):
    """Outcome of creating one backup for one table."""

    backup_name: str
    backup_arn: Optional[str] = None


class DeleteOutcome(TaskResult):
    """Outcome of deleting one stale backup."""

    backup_name: str
    backup_arn: str
    already_deleted: bool = False


class ExpireResult(TaskResult):
    """
    Outcome of expiring the stale backups of one table.

    ``count`` is the number of delete attempts made, failed ones included.
    ``deleted_count`` and ``failed_count`` split that number by outcome.
    """

    count: int = Field(default=0, ge=0)
    deleted_count: int = Field(default=0, ge=0)
    failed_count: int = Field(default=0, ge=0)

    @classmethod
    def from_outcomes(
        cls, table_name: str, outcomes: List[DeleteOutcome]
    ) -> "ExpireResult":
        failed = sum(1 for outcome in outcomes if not outcome.success)
        return cls(
            table_name=table_name,
            count=len(outcomes),
            deleted_count=len(outcomes) - failed,
            failed_count=failed,
        )


class RunSummary(BaseModel):
    """Model for run summary logging."""

    run_id: str
    start_time: str
    end_time: str
    duration: float
    status: str  # completed, completed_with_failures
    matched_tables: List[str] = Field(default_factory=list)
    create_results: List[CreateResult] = Field(default_factory=list)
    expire_results: List[ExpireResult] = Field(default_factory=list)
    partial_match: bool = False
    summary: Optional[str] = None

    @property
    def successful_operations(self) -> int:
        return sum(
            1 for r in [*self.create_results, *self.expire_results] if r.success
        )

    @property
    def failed_operations(self) -> int:
        return sum(
            1 for r in [*self.create_results, *self.expire_results] if not r.success
        )

    @property
    def failed_deletes(self) -> int:
        return sum(r.failed_count for r in self.expire_results)
