"""
Per-table and per-backup units of work.

CreateTask and ExpireTask run once per matched table on the table pool.
ExpireTask fans out one DeleteTask per stale backup onto the delete pool
and waits for all of them before reporting. Every task returns exactly
one result and never raises; failures are logged and carried in the
result's error_message.
"""

from concurrent.futures import Executor, wait
from datetime import datetime, timedelta
from typing import List, Optional

from dynamodb_backups.config.models import (
    BackupRecord,
    CreateResult,
    DeleteOutcome,
    ExpireResult,
    NamingConfig,
)
from dynamodb_backups.core.cancellation import CancellationToken
from dynamodb_backups.core.context import RunContext
from dynamodb_backups.exceptions import BackupNotFoundError


def build_backup_name(
    table_name: str, now: datetime, naming: NamingConfig
) -> str:
    """
    Build ``<table>_<timestamp>`` from a UTC time.

    With ``naming.include_hour`` disabled the timestamp omits the hour, so
    two runs in different hours at the same minute and second share a name.
    """
    return f"{table_name}_{now.strftime(naming.timestamp_format)}"


class CreateTask:
    """Creates one backup of one table."""

    def __init__(
        self,
        context: RunContext,
        table_name: str,
        token: CancellationToken,
        backup_name: Optional[str] = None,
    ):
        self.context = context
        self.table_name = table_name
        self.token = token
        self.backup_name = backup_name or build_backup_name(
            table_name, context.clock(), context.config.naming
        )
        self.logger = context.logger.bind(table=table_name, action="createBackup")

    def run(self) -> CreateResult:
        backup_name = self.backup_name
        logger = self.logger.bind(backup_name=backup_name)

        try:
            self.token.raise_if_cancelled()
            logger.info(f"Creating backup for table {self.table_name}")
            details = self.context.store.create_backup(self.table_name, backup_name)
        except Exception as e:
            error_msg = f"Failed to create backup for table {self.table_name}: {str(e)}"
            logger.error(error_msg)
            return CreateResult(
                table_name=self.table_name,
                backup_name=backup_name,
                error_message=error_msg,
            )

        logger.debug("Created backup", response=details)
        return CreateResult(
            table_name=self.table_name,
            backup_name=backup_name,
            backup_arn=details.get("BackupArn"),
        )


class DeleteTask:
    """Deletes one stale backup. One attempt, no retry."""

    def __init__(self, context: RunContext, record: BackupRecord, token: CancellationToken):
        self.context = context
        self.record = record
        self.token = token
        self.logger = context.logger.bind(
            table=record.table_name,
            backup_name=record.backup_name,
            action="deleteBackup",
        )

    def _outcome(self, **kwargs) -> DeleteOutcome:
        return DeleteOutcome(
            table_name=self.record.table_name,
            backup_name=self.record.backup_name,
            backup_arn=self.record.backup_arn,
            **kwargs,
        )

    def run(self) -> DeleteOutcome:
        try:
            self.token.raise_if_cancelled()
            self.logger.info(f"Deleting backup for table {self.record.table_name}")
            description = self.context.store.delete_backup(self.record.backup_arn)
        except BackupNotFoundError:
            # A previous, interrupted run may already have removed it.
            self.logger.warning("Backup already deleted")
            return self._outcome(already_deleted=True)
        except Exception as e:
            error_msg = f"Failed to delete backup {self.record.backup_arn}: {str(e)}"
            self.logger.error(error_msg)
            return self._outcome(error_message=error_msg)

        self.logger.debug("Deleted backup", response=description)
        return self._outcome()


class ExpireTask:
    """Deletes every backup of one table older than the retention window."""

    def __init__(
        self,
        context: RunContext,
        table_name: str,
        token: CancellationToken,
        delete_executor: Executor,
    ):
        self.context = context
        self.table_name = table_name
        self.token = token
        self.delete_executor = delete_executor
        self.logger = context.logger.bind(table=table_name, action="expireBackups")

    def cutoff(self) -> datetime:
        return self.context.clock() - timedelta(
            days=self.context.config.backup_expire_days
        )

    def find_stale_backups(self, cutoff: datetime) -> List[BackupRecord]:
        records = self.context.store.list_backups(self.table_name, cutoff)
        # Backups created exactly at the cutoff are retained.
        stale = [record for record in records if record.created_at < cutoff]
        self.logger.debug(
            f"Found {len(stale)} backups older than {cutoff.isoformat()}",
            listed=len(records),
        )
        return stale

    def run(self) -> ExpireResult:
        cutoff = self.cutoff()
        try:
            self.token.raise_if_cancelled()
            stale = self.find_stale_backups(cutoff)
        except Exception as e:
            error_msg = f"Failed to list backups for table {self.table_name}: {str(e)}"
            self.logger.error(error_msg)
            return ExpireResult(table_name=self.table_name, count=0, error_message=error_msg)

        outcomes = self._delete_all(stale)
        return ExpireResult.from_outcomes(self.table_name, outcomes)

    def _delete_all(self, stale: List[BackupRecord]) -> List[DeleteOutcome]:
        """Fan out one DeleteTask per backup and wait for every outcome."""
        if not stale:
            return []

        future_to_record = {
            self.delete_executor.submit(
                DeleteTask(self.context, record, self.token).run
            ): record
            for record in stale
        }
        _, not_done = wait(future_to_record, timeout=self.token.remaining())

        outcomes: List[DeleteOutcome] = []
        for future, record in future_to_record.items():
            if future in not_done:
                future.cancel()
                error_msg = (
                    f"Delete of backup {record.backup_arn} did not finish "
                    f"before the run deadline"
                )
            else:
                try:
                    outcomes.append(future.result())
                    continue
                except Exception as e:
                    error_msg = f"Failed to delete backup {record.backup_arn}: {str(e)}"

            self.logger.error(error_msg, backup_name=record.backup_name)
            outcomes.append(
                DeleteOutcome(
                    table_name=record.table_name,
                    backup_name=record.backup_name,
                    backup_arn=record.backup_arn,
                    error_message=error_msg,
                )
            )
        return outcomes
