"""Shared fixtures for integration tests."""

import os

import pytest

# Skip all integration tests unless RUN_NOWSYNC_NETWORK_TESTS=1
pytestmark = pytest.mark.skipif(
    os.environ.get("RUN_NOWSYNC_NETWORK_TESTS") != "1",
    reason="Requires network access. Set RUN_NOWSYNC_NETWORK_TESTS=1 to run",
)


@pytest.fixture
def instance_options():
    """Connection options of the instance under test, read from the environment."""
    uri = os.environ.get("NOWSYNC_URI")
    if not uri:
        pytest.skip("NOWSYNC_URI is not set")
    return {
        "uri": uri,
        "table": os.environ.get("NOWSYNC_TABLE", "sys_user_group"),
        "limit": 100,
    }


@pytest.fixture
def credentials():
    return {
        "username": os.environ.get("NOWSYNC_USERNAME"),
        "password": os.environ.get("NOWSYNC_PASSWORD"),
    }
