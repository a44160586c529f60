"""Test configuration and shared fixtures.

Provide isolated host settings, fake dependency handles and client
factories. Every fixture keeps tests independent of the process environment
and of any `.env` file.
"""
import asyncio
import os
import threading
from typing import Callable, Generator, Optional
from unittest import mock

import pytest
from fastapi.testclient import TestClient

from pulsecheck.config import Settings
from pulsecheck.main import create_app

# ==============================================================================
# FAKE DEPENDENCIES
# ==============================================================================


class FakeDatabase:
    """Async dependency handle with a scripted ping outcome.

    Args:
        error: Exception raised by ``ping``, or None for success.
        delay: Seconds ``ping`` sleeps before answering.
        result: Value returned by a successful ``ping``.
    """

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0, result=None):
        self.error = error
        self.delay = delay
        self.result = result
        self.calls = 0

    async def ping(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class BlockingDatabase:
    """Sync dependency handle whose ping blocks until released."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.release = threading.Event()
        self.calls = 0

    def ping(self):
        self.calls += 1
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error


# ==============================================================================
# CONFIGURATION FIXTURES
# ==============================================================================

@pytest.fixture(scope="session")
def mock_settings() -> Settings:
    """Provide isolated host configuration.

    Returns:
        Settings: Development environment with debug logging.
    """
    return Settings(
        ENVIRONMENT="development",
        LOG_LEVEL="debug",
        _env_file=None  # Bypass local environment file
    )


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Run the test with an empty process environment."""
    with mock.patch.dict(os.environ, {}, clear=True):
        yield


# ==============================================================================
# CLIENT FIXTURES
# ==============================================================================

@pytest.fixture
def make_client(mock_settings: Settings) -> Generator[Callable[..., TestClient], None, None]:
    """Provide a factory for started test clients around fresh host apps.

    The plugin resolver reads an empty environment unless the test passes
    one explicitly. Clients are shut down after the test.

    Yields:
        Callable[..., TestClient]: ``make_client(database=None, options=None,
            environment=None)``.
    """
    clients: list[TestClient] = []

    def _make(database=None, options=None, environment=None) -> TestClient:
        app = create_app(
            database=database,
            options=options,
            settings=mock_settings,
            environment=environment if environment is not None else {},
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Provide a started client for a host without a dependency."""
    return make_client()
