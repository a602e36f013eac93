"""
Backup module for the DynamoDB backup system.

This module provides table matching, the per-table create and expire
tasks, and the orchestrator that runs them concurrently.
"""

from .backup_manager import BackupOrchestrator
from .table_matcher import TableMatcher
from .tasks import CreateTask, DeleteTask, ExpireTask, build_backup_name

__all__ = [
    "BackupOrchestrator",
    "CreateTask",
    "DeleteTask",
    "ExpireTask",
    "TableMatcher",
    "build_backup_name",
]
