"""
Pytest configuration and shared fixtures.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from cassandra.cluster import ResponseFuture


@pytest.fixture
def thread_pool():
    """Thread pool standing in for a shared executor."""
    executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="resolver")
    yield executor
    executor.shutdown(wait=True)


@pytest.fixture
def observer_logs(caplog):
    """Capture warnings written by the library."""
    caplog.set_level(logging.WARNING, logger="async_futureutils")
    return caplog


@pytest.fixture
def mock_response_future():
    """Create a mock ResponseFuture that records registered callbacks."""
    future = Mock(spec=ResponseFuture)
    future.add_callbacks = Mock()
    return future
