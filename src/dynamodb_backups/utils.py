"""
Client and clock helpers for the DynamoDB backup system.
"""

from datetime import datetime, timezone

import boto3
from botocore.config import Config

from dynamodb_backups.config.models import AwsConfig


def create_dynamodb_client(aws_config: AwsConfig):
    """
    Create a DynamoDB client shared by every worker thread.

    Connect and read timeouts keep a hung network call from stalling a
    worker forever; the failed call surfaces as a task-local error.

    Args:
        aws_config: AWS client configuration

    Returns:
        boto3 DynamoDB client
    """
    client_config = Config(
        connect_timeout=aws_config.connect_timeout,
        read_timeout=aws_config.read_timeout,
        max_pool_connections=aws_config.max_pool_connections,
    )
    return boto3.client(
        "dynamodb",
        region_name=aws_config.region_name,
        endpoint_url=aws_config.endpoint_url,
        config=client_config,
    )


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)
