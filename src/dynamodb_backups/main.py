#!/usr/bin/env python3
"""
Main entry point for the DynamoDB backup system.

Configuration is read from an optional YAML file and from environment
variables; command-line options override both.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional
import uuid

from .audit.logger import configure_logging, get_logger
from .backup.backup_manager import BackupOrchestrator
from .backup.table_matcher import TableMatcher
from .config.loader import ConfigLoader
from .config.models import BackupSystemConfig
from .core.context import RunContext
from .dynamodb_operations import DynamoDBOperations
from .exceptions import ConfigurationError, DynamoDBBackupsError
from .utils import create_dynamodb_client


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamodb-backups",
        description="Create DynamoDB backups and delete expired ones",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Back up every table starting with orders_ and keep 7 days of backups
  dynamodb-backups --table-regex '^orders_' --expire-days 7

  # Use a configuration file
  dynamodb-backups config.yaml

  # Show which tables would be processed
  dynamodb-backups config.yaml --dry-run
        """,
    )

    parser.add_argument(
        "config_file", nargs="?", help="Path to an optional YAML configuration file"
    )
    parser.add_argument("--table-regex", help="Regular expression selecting tables")
    parser.add_argument(
        "--expire-days", type=int, help="Delete backups older than this many days"
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration without running operations",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List matched tables without creating or deleting backups",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    return parser


def load_configuration(args: argparse.Namespace) -> BackupSystemConfig:
    """Load configuration with command-line values taking precedence."""
    env: Dict[str, str] = dict(os.environ)
    if args.table_regex is not None:
        env["TABLE_REGEX"] = args.table_regex
    if args.expire_days is not None:
        env["BACKUP_EXPIRE_DAYS"] = str(args.expire_days)
    if args.verbose:
        env["LOG_LEVEL"] = "DEBUG"

    if args.config_file:
        return ConfigLoader.load_from_file(Path(args.config_file), env)
    return ConfigLoader.load_from_env(env)


def create_context(config: BackupSystemConfig) -> RunContext:
    """Build the run context around a fresh DynamoDB client."""
    store = DynamoDBOperations(create_dynamodb_client(config.aws))
    return RunContext(store=store, config=config, logger=get_logger())


def run_dry_run(context: RunContext) -> int:
    """Log the tables a run would process."""
    matcher = TableMatcher(context)
    matched_tables = matcher.match()
    context.logger.info(
        f"Dry-run mode: would back up and expire {len(matched_tables)} tables",
        matched_tables=matched_tables,
        backup_expire_days=context.config.backup_expire_days,
    )
    return 1 if matcher.listing_error is not None else 0


def run_backups(context: RunContext) -> int:
    """Run a full backup pass. Returns 0 only if every operation succeeded."""
    orchestrator = BackupOrchestrator(context, run_id=str(uuid.uuid4()))
    summary = orchestrator.run_backup_operations()

    if summary.status != "completed":
        context.logger.error(
            f"Backup run completed with {summary.failed_operations} failed operations "
            f"and {summary.failed_deletes} failed deletes"
        )
        return 1

    context.logger.info("All backup operations completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the DynamoDB backup system."""
    args = build_parser().parse_args(argv)

    try:
        config = load_configuration(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging)
    logger = get_logger()

    if args.validate_only:
        logger.info("Configuration validation completed successfully")
        return 0

    try:
        context = create_context(config)
        if args.dry_run:
            return run_dry_run(context)
        return run_backups(context)
    except DynamoDBBackupsError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.error(f"Backup run failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
