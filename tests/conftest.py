"""Pytest configuration and fixtures."""

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
import structlog

from dynamodb_backups.core.cancellation import CancellationToken

from fakes import NOW


@pytest.fixture
def cutoff():
    """Cutoff for the default one-day retention at NOW."""
    return NOW - timedelta(days=1)


@pytest.fixture
def token():
    return CancellationToken()


@pytest.fixture
def delete_executor():
    executor = ThreadPoolExecutor(max_workers=4)
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
