"""
Backup orchestrator with concurrent execution and structured logging.

For every matched table one CreateTask and one ExpireTask run on a
bounded table pool; expire tasks push their deletes onto a separate
bounded delete pool so they can block on their own deletes without
starving the table pool. Results are collected in completion order.
"""

import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from dynamodb_backups.config.models import CreateResult, ExpireResult, RunSummary
from dynamodb_backups.core.base_manager import BaseManager
from dynamodb_backups.core.cancellation import CancellationToken
from dynamodb_backups.core.context import RunContext

from .table_matcher import TableMatcher
from .tasks import CreateTask, ExpireTask, build_backup_name

R = TypeVar("R")
T = TypeVar("T", CreateTask, ExpireTask)


class BackupOrchestrator(BaseManager):
    """Creates and expires backups for a set of tables concurrently."""

    def __init__(self, context: RunContext, run_id: Optional[str] = None):
        super().__init__(context, run_id)
        self.max_workers = self.config.concurrency.max_workers
        self.max_delete_workers = self.config.concurrency.max_delete_workers
        self.timeout_seconds = self.config.concurrency.timeout_seconds

    def run_backup_operations(self) -> RunSummary:
        """
        Match tables, back them up and expire old backups.

        Returns:
            RunSummary with one create and one expire result per matched table

        Raises:
            InvalidTablePatternError: If the configured pattern is malformed
            TableListingError: If listing fails and strict listing is enabled
        """
        start_time = datetime.now(timezone.utc)
        started = time.monotonic()

        matcher = TableMatcher(self.context)
        matched_tables = matcher.match()
        self.logger.info(
            f"Matched {len(matched_tables)} tables",
            matched_tables=matched_tables,
            count=len(matched_tables),
            regex=self.config.table_regex,
        )

        summary = self.run(
            matched_tables,
            start_time=start_time,
            partial_match=matcher.listing_error is not None,
        )
        self.log_run_summary(summary)
        self.logger.info(
            f"Execution time: {time.monotonic() - started:.3f}s"
        )
        return summary

    def run(
        self,
        table_names: List[str],
        start_time: Optional[datetime] = None,
        partial_match: bool = False,
    ) -> RunSummary:
        """Process the given tables and build a summary of the results."""
        start_time = start_time or datetime.now(timezone.utc)
        create_results, expire_results = self.process_tables(table_names)
        return self.create_summary(
            start_time, table_names, create_results, expire_results, partial_match
        )

    def process_tables(
        self, table_names: List[str]
    ) -> Tuple[List[CreateResult], List[ExpireResult]]:
        """
        Run one CreateTask and one ExpireTask per table and collect all results.

        Exactly len(table_names) results are returned in each list, in the
        order tasks finished. Tasks still running at the run deadline are
        reported as failed.
        """
        if not table_names:
            self.logger.info("No tables to process")
            return [], []

        token = CancellationToken(self.timeout_seconds)
        self.logger.info(
            f"Starting backup of {len(table_names)} tables using {self.max_workers} "
            f"workers and {self.max_delete_workers} delete workers"
        )

        table_executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="backup-table"
        )
        delete_executor = ThreadPoolExecutor(
            max_workers=self.max_delete_workers, thread_name_prefix="backup-delete"
        )
        try:
            create_futures = {}
            for table_name in table_names:
                backup_name = build_backup_name(
                    table_name, self.context.clock(), self.config.naming
                )
                task = CreateTask(self.context, table_name, token, backup_name)
                create_futures[table_executor.submit(task.run)] = task

            expire_futures = {}
            for table_name in table_names:
                task = ExpireTask(self.context, table_name, token, delete_executor)
                expire_futures[table_executor.submit(task.run)] = task

            create_results = self._collect(
                create_futures, token, self._failed_create, self._log_create_result
            )
            expire_results = self._collect(
                expire_futures, token, self._failed_expire, self._log_expire_result
            )
        finally:
            token.cancel()
            # Do not wait on threads stuck in a store call past the deadline.
            delete_executor.shutdown(wait=False, cancel_futures=True)
            table_executor.shutdown(wait=False, cancel_futures=True)

        return create_results, expire_results

    def _collect(
        self,
        future_to_task: Dict[Future, T],
        token: CancellationToken,
        on_failure: Callable[[T, str], R],
        log_result: Callable[[R], None],
    ) -> List[R]:
        """Drain every future in completion order, one result per future."""
        results: List[R] = []
        pending = set(future_to_task)

        try:
            for future in as_completed(future_to_task, timeout=token.remaining()):
                pending.discard(future)
                result = self._result_of(future, future_to_task[future], on_failure)
                results.append(result)
                log_result(result)
        except FuturesTimeoutError:
            token.cancel()
            for future, task in future_to_task.items():
                if future not in pending:
                    continue
                # Finished between the timeout and this loop.
                if future.done() and not future.cancelled():
                    result = self._result_of(future, task, on_failure)
                else:
                    future.cancel()
                    result = on_failure(
                        task,
                        f"Task for table {task.table_name} did not finish within "
                        f"{self.timeout_seconds}s",
                    )
                results.append(result)
                log_result(result)

        return results

    def _result_of(
        self, future: Future, task: T, on_failure: Callable[[T, str], R]
    ) -> R:
        try:
            return future.result()
        except Exception as e:
            error_msg = f"Task for table {task.table_name} failed: {str(e)}"
            self.logger.error(error_msg, table=task.table_name, exc_info=True)
            return on_failure(task, error_msg)

    def _failed_create(self, task: CreateTask, error_msg: str) -> CreateResult:
        return CreateResult(
            table_name=task.table_name,
            backup_name=task.backup_name,
            error_message=error_msg,
        )

    def _failed_expire(self, task: ExpireTask, error_msg: str) -> ExpireResult:
        return ExpireResult(
            table_name=task.table_name, count=0, error_message=error_msg
        )

    def _log_create_result(self, result: CreateResult) -> None:
        log = self.logger.bind(table=result.table_name, backup_name=result.backup_name)
        if result.success:
            log.info(f"Created backup for table {result.table_name}")
        else:
            log.error(
                f"Backup of table {result.table_name} failed: {result.error_message}"
            )

    def _log_expire_result(self, result: ExpireResult) -> None:
        log = self.logger.bind(
            table=result.table_name,
            count=result.count,
            deleted_count=result.deleted_count,
            failed_count=result.failed_count,
        )
        if result.success:
            log.info(f"Deleted {result.count} backups from table {result.table_name}")
        else:
            log.error(
                f"Expiring backups of table {result.table_name} failed: "
                f"{result.error_message}"
            )
