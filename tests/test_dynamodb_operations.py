"""Tests for DynamoDBOperations against a stubbed boto3 client."""

from datetime import datetime, timezone

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from dynamodb_backups.dynamodb_operations import DynamoDBOperations
from dynamodb_backups.exceptions import BackupNotFoundError

from fakes import backup_arn

CUTOFF = datetime(2024, 3, 14, 13, 45, 30, tzinfo=timezone.utc)


@pytest.fixture
def client():
    return boto3.client(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(client):
    with Stubber(client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def operations(client):
    return DynamoDBOperations(client)


def summary(table_name, backup_id, created_at):
    return {
        "TableName": table_name,
        "BackupArn": backup_arn(table_name, backup_id),
        "BackupName": f"{table_name}_{backup_id}",
        "BackupCreationDateTime": created_at,
    }


def test_list_table_names_follows_pages(operations, stubber):
    stubber.add_response(
        "list_tables",
        {"TableNames": ["logs", "orders_2"], "LastEvaluatedTableName": "orders_2"},
        {},
    )
    stubber.add_response(
        "list_tables",
        {"TableNames": ["orders_1"]},
        {"ExclusiveStartTableName": "orders_2"},
    )

    assert list(operations.list_table_names()) == ["logs", "orders_2", "orders_1"]


def test_list_table_names_error_after_first_page(operations, stubber):
    stubber.add_response(
        "list_tables",
        {"TableNames": ["orders_1"], "LastEvaluatedTableName": "orders_1"},
        {},
    )
    stubber.add_client_error("list_tables", service_error_code="InternalServerError")

    received = []
    with pytest.raises(ClientError):
        for name in operations.list_table_names():
            received.append(name)

    assert received == ["orders_1"]


def test_create_backup(operations, stubber):
    created_at = datetime(2024, 3, 15, 13, 45, 30, tzinfo=timezone.utc)
    stubber.add_response(
        "create_backup",
        {
            "BackupDetails": {
                "BackupArn": backup_arn("orders_1", 1),
                "BackupName": "orders_1_20240315134530",
                "BackupStatus": "CREATING",
                "BackupType": "USER",
                "BackupCreationDateTime": created_at,
            }
        },
        {"TableName": "orders_1", "BackupName": "orders_1_20240315134530"},
    )

    details = operations.create_backup("orders_1", "orders_1_20240315134530")

    assert details["BackupArn"] == backup_arn("orders_1", 1)
    assert details["BackupStatus"] == "CREATING"


def test_list_backups_follows_pages(operations, stubber):
    older = datetime(2024, 3, 10, tzinfo=timezone.utc)
    stubber.add_response(
        "list_backups",
        {
            "BackupSummaries": [summary("orders_1", 1, older)],
            "LastEvaluatedBackupArn": backup_arn("orders_1", 1),
        },
        {"TableName": "orders_1", "TimeRangeUpperBound": CUTOFF, "BackupType": "USER"},
    )
    stubber.add_response(
        "list_backups",
        {"BackupSummaries": [summary("orders_1", 2, older)]},
        {
            "TableName": "orders_1",
            "TimeRangeUpperBound": CUTOFF,
            "BackupType": "USER",
            "ExclusiveStartBackupArn": backup_arn("orders_1", 1),
        },
    )

    records = operations.list_backups("orders_1", CUTOFF)

    assert [r.backup_arn for r in records] == [
        backup_arn("orders_1", 1),
        backup_arn("orders_1", 2),
    ]
    assert records[0].table_name == "orders_1"
    assert records[0].backup_name == "orders_1_1"
    assert records[0].created_at == older


def test_delete_backup(operations, stubber):
    arn = backup_arn("orders_1", 1)
    stubber.add_response(
        "delete_backup",
        {
            "BackupDescription": {
                "BackupDetails": {
                    "BackupArn": arn,
                    "BackupName": "orders_1_1",
                    "BackupStatus": "DELETED",
                    "BackupType": "USER",
                    "BackupCreationDateTime": CUTOFF,
                }
            }
        },
        {"BackupArn": arn},
    )

    description = operations.delete_backup(arn)

    assert description["BackupDetails"]["BackupStatus"] == "DELETED"


def test_delete_missing_backup_raises_not_found(operations, stubber):
    arn = backup_arn("orders_1", 1)
    stubber.add_client_error(
        "delete_backup",
        service_error_code="BackupNotFoundException",
        expected_params={"BackupArn": arn},
    )

    with pytest.raises(BackupNotFoundError) as exc_info:
        operations.delete_backup(arn)

    assert exc_info.value.backup_arn == arn


def test_delete_other_errors_propagate(operations, stubber):
    arn = backup_arn("orders_1", 1)
    stubber.add_client_error(
        "delete_backup",
        service_error_code="BackupInUseException",
        expected_params={"BackupArn": arn},
    )

    with pytest.raises(ClientError):
        operations.delete_backup(arn)
