"""Fake store and context helpers shared by the tests."""

import itertools
import threading
import time
from datetime import datetime, timedelta, timezone

import structlog

from dynamodb_backups.config.models import BackupRecord, BackupSystemConfig
from dynamodb_backups.core.context import RunContext
from dynamodb_backups.exceptions import BackupNotFoundError

NOW = datetime(2024, 3, 15, 13, 45, 30, tzinfo=timezone.utc)


def backup_arn(table_name, backup_id):
    return (
        f"arn:aws:dynamodb:us-east-1:123456789012:table/{table_name}"
        f"/backup/{backup_id:014d}-abcdefgh"
    )


def make_record(table_name, backup_id, created_at):
    return BackupRecord(
        table_name=table_name,
        backup_name=f"{table_name}_{backup_id}",
        created_at=created_at,
        backup_arn=backup_arn(table_name, backup_id),
    )


class FakeStore:
    """In-memory, thread-safe stand-in for DynamoDBOperations."""

    def __init__(
        self,
        table_pages=None,
        backups=None,
        fail_create=(),
        fail_list_backups=(),
        fail_delete=(),
        missing=(),
        listing_error_page=None,
        honor_bound=True,
        delay=0.0,
    ):
        self.table_pages = table_pages if table_pages is not None else [[]]
        self.backups = {table: list(records) for table, records in (backups or {}).items()}
        self.fail_create = set(fail_create)
        self.fail_list_backups = set(fail_list_backups)
        self.fail_delete = set(fail_delete)
        self.missing = set(missing)
        self.listing_error_page = listing_error_page
        self.honor_bound = honor_bound
        self.delay = delay

        self.calls = []
        self.created = []
        self.deleted = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def _enter(self, operation, *args):
        with self._lock:
            self.calls.append((operation, args))
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        if self.delay:
            time.sleep(self.delay)

    def _exit(self):
        with self._lock:
            self.active -= 1

    def calls_for(self, operation):
        return [args for op, args in self.calls if op == operation]

    def list_table_names(self):
        for page_number, page in enumerate(self.table_pages):
            with self._lock:
                self.calls.append(("list_tables", (page_number,)))
            if page_number == self.listing_error_page:
                raise RuntimeError("ListTables throttled")
            yield from page

    def create_backup(self, table_name, backup_name):
        self._enter("create_backup", table_name, backup_name)
        try:
            if table_name in self.fail_create:
                raise RuntimeError(f"CreateBackup failed for {table_name}")
            with self._lock:
                self.created.append((table_name, backup_name))
            return {"BackupArn": backup_arn(table_name, len(self.created)), "BackupName": backup_name}
        finally:
            self._exit()

    def list_backups(self, table_name, created_before):
        self._enter("list_backups", table_name, created_before)
        try:
            if table_name in self.fail_list_backups:
                raise RuntimeError(f"ListBackups failed for {table_name}")
            records = self.backups.get(table_name, [])
            if self.honor_bound:
                records = [r for r in records if r.created_at < created_before]
            return list(records)
        finally:
            self._exit()

    def delete_backup(self, arn):
        self._enter("delete_backup", arn)
        try:
            if arn in self.fail_delete:
                raise RuntimeError(f"DeleteBackup failed for {arn}")
            if arn in self.missing:
                raise BackupNotFoundError(arn)
            with self._lock:
                self.deleted.append(arn)
            return {"BackupDetails": {"BackupArn": arn}}
        finally:
            self._exit()


class BlockingStore(FakeStore):
    """FakeStore whose calls for the given tables or ARNs hang until released."""

    def __init__(self, block_create=(), block_delete=(), **kwargs):
        super().__init__(**kwargs)
        self.block_create = set(block_create)
        self.block_delete = set(block_delete)
        self.release = threading.Event()

    def create_backup(self, table_name, backup_name):
        if table_name in self.block_create:
            self.release.wait(10)
        return super().create_backup(table_name, backup_name)

    def delete_backup(self, arn):
        if arn in self.block_delete:
            self.release.wait(10)
        return super().delete_backup(arn)


def make_config(**overrides):
    values = {"table_regex": "^orders_", "backup_expire_days": 1}
    values.update(overrides)
    return BackupSystemConfig.model_validate(values)


def make_context(store, clock=None, **overrides):
    return RunContext(
        store=store,
        config=make_config(**overrides),
        logger=structlog.get_logger(),
        clock=clock or (lambda: NOW),
    )


def advancing_clock(step=timedelta(seconds=1)):
    """Clock that moves forward by step on every reading, starting at NOW."""
    ticks = itertools.count()
    return lambda: NOW + step * next(ticks)


