"""Pytest fixtures for FuseDB tests."""

import pytest

from fusedb import Engine, EventBus, InMemoryDriver
from fusedb.testing import BareDriver, RecordingMiddleware

TEST_KEY = "0123456789abcdef0123456789abcdef"


@pytest.fixture
def crypto_key():
    """A valid 32-byte AES-256 key."""
    return TEST_KEY


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
async def engine(bus):
    """Connected engine over the default in-memory driver."""
    e = Engine(events=bus)
    await e.connect()
    yield e
    await e.disconnect()


@pytest.fixture
def bare_driver():
    """Driver without bulk or snapshot capabilities."""
    return BareDriver()


@pytest.fixture
def hook_log():
    """Shared log for observing middleware ordering."""
    return []


@pytest.fixture
def memory_driver():
    return InMemoryDriver()


@pytest.fixture
def recorder(hook_log):
    return RecordingMiddleware("rec", hook_log)
