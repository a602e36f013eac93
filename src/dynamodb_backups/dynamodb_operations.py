"""
DynamoDB operations utility for table and backup management.

This module wraps the boto3 DynamoDB client with the four calls the
backup system needs: table listing, backup creation, backup listing
and backup deletion.
"""

from datetime import datetime
from typing import Iterator, List

from botocore.exceptions import ClientError

from dynamodb_backups.config.models import BackupRecord
from dynamodb_backups.exceptions import BackupNotFoundError


class DynamoDBOperations:
    """Utility class for DynamoDB backup operations."""

    def __init__(self, client):
        """
        Initialize DynamoDB operations.

        Args:
            client: boto3 DynamoDB client, shared across threads
        """
        self.client = client

    def list_table_names(self) -> Iterator[str]:
        """
        Yield every table name in the account/region, page by page.

        Errors raised by a page request propagate from the iterator, so a
        consumer keeps whatever names it already received.
        """
        paginator = self.client.get_paginator("list_tables")
        for page in paginator.paginate():
            yield from page.get("TableNames", [])

    def create_backup(self, table_name: str, backup_name: str) -> dict:
        """
        Create an on-demand backup of a table.

        Args:
            table_name: Name of the table to back up
            backup_name: Name for the new backup

        Returns:
            BackupDetails of the created backup
        """
        response = self.client.create_backup(
            TableName=table_name, BackupName=backup_name
        )
        return response.get("BackupDetails", {})

    def list_backups(
        self, table_name: str, created_before: datetime
    ) -> List[BackupRecord]:
        """
        List user backups of a table created before a point in time.

        DynamoDB treats TimeRangeUpperBound as exclusive. Every page is
        consumed.

        Args:
            table_name: Name of the table
            created_before: Exclusive upper bound on backup creation time

        Returns:
            List of BackupRecord objects
        """
        records: List[BackupRecord] = []
        paginator = self.client.get_paginator("list_backups")
        pages = paginator.paginate(
            TableName=table_name,
            TimeRangeUpperBound=created_before,
            BackupType="USER",
        )

        for page in pages:
            for summary in page.get("BackupSummaries", []):
                records.append(
                    BackupRecord(
                        table_name=summary["TableName"],
                        backup_name=summary["BackupName"],
                        created_at=summary["BackupCreationDateTime"],
                        backup_arn=summary["BackupArn"],
                    )
                )
        return records

    def delete_backup(self, backup_arn: str) -> dict:
        """
        Delete a backup.

        Args:
            backup_arn: ARN of the backup to delete

        Returns:
            BackupDescription of the deleted backup

        Raises:
            BackupNotFoundError: If the backup no longer exists
        """
        try:
            response = self.client.delete_backup(BackupArn=backup_arn)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "BackupNotFoundException":
                raise BackupNotFoundError(backup_arn) from e
            raise
        return response.get("BackupDescription", {})
