"""
Base manager class with common functionality for backup runs.

This module provides run identity, summary construction and summary
logging shared by the managers that drive a run.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from dynamodb_backups.config.models import CreateResult, ExpireResult, RunSummary
from dynamodb_backups.core.context import RunContext


class BaseManager:
    """Base manager class with common functionality for backup runs."""

    def __init__(self, context: RunContext, run_id: Optional[str] = None):
        """
        Initialize the base manager.

        Args:
            context: Store handle, configuration and logger for the run
            run_id: Optional run identifier
        """
        self.context = context
        self.config = context.config
        self.store = context.store
        self.run_id = run_id or str(uuid.uuid4())
        self.logger = context.logger.bind(run_id=self.run_id)

    def create_summary(
        self,
        start_time: datetime,
        matched_tables: List[str],
        create_results: List[CreateResult],
        expire_results: List[ExpireResult],
        partial_match: bool = False,
    ) -> RunSummary:
        """
        Create a run summary object.

        Args:
            start_time: Run start time
            matched_tables: Tables the run was asked to process
            create_results: One result per matched table
            expire_results: One result per matched table
            partial_match: True when table listing stopped early
        """
        end_time = datetime.now(timezone.utc)
        duration = (end_time - start_time).total_seconds()

        failed_creates = sum(1 for r in create_results if not r.success)
        failed_expires = sum(1 for r in expire_results if not r.success)
        failed_deletes = sum(r.failed_count for r in expire_results)
        deleted = sum(r.deleted_count for r in expire_results)

        if failed_creates or failed_expires or failed_deletes or partial_match:
            status = "completed_with_failures"
        else:
            status = "completed"

        summary_text = (
            f"Backup run completed in {duration:.1f}s. "
            f"Matched {len(matched_tables)} tables, "
            f"created {len(create_results) - failed_creates}/{len(create_results)} backups, "
            f"deleted {deleted} expired backups "
            f"({failed_deletes} delete failures, {failed_expires} expire failures)"
        )
        if partial_match:
            summary_text += ". Table listing was incomplete"

        return RunSummary(
            run_id=self.run_id,
            start_time=start_time.isoformat(),
            end_time=end_time.isoformat(),
            duration=duration,
            status=status,
            matched_tables=list(matched_tables),
            create_results=create_results,
            expire_results=expire_results,
            partial_match=partial_match,
            summary=summary_text,
        )

    def log_run_summary(self, summary: RunSummary) -> None:
        """Log the run summary at a level matching its status."""
        log = self.logger.bind(
            status=summary.status,
            successful_operations=summary.successful_operations,
            failed_operations=summary.failed_operations,
            duration=round(summary.duration, 3),
        )
        if summary.status == "completed":
            log.info(summary.summary)
        else:
            log.warning(summary.summary)
