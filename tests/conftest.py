"""Shared pytest fixtures for px500 tests.

Fixture Organization:
    - Fake API: an in-memory 500px backend (see fake_api.py)
    - Client fixtures: clients wired to the fake API
    - Environment fixtures: config singleton reset, throttle removal
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio

# Add tests directory to sys.path so test modules can import fake_api
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from fake_api import FakeAPI, make_client  # noqa: E402

from px500 import endpoints  # noqa: E402
from px500.config import reset_config  # noqa: E402

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate tests from PX500_* variables and the config singleton."""
    for name in (
        "PX500_CONSUMER_KEY",
        "PX500_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def no_throttle(monkeypatch):
    """Remove the delay between page fetches."""
    for endpoint in (endpoints.LIST, endpoints.SEARCH, endpoints.COMMENTS):
        monkeypatch.setattr(endpoint, "throttle", 0.0)


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


@pytest_asyncio.fixture
async def client(fake_api, no_throttle):
    """Client wired to the fake API with throttling disabled."""
    async with make_client(fake_api) as c:
        yield c
