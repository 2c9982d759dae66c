"""
Shared test fixtures.

Credentials are required settings, so dummy values are set before any
application module is imported.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

os.environ.setdefault("MARIANATEK_API_KEY", "test-marianatek-key")
os.environ.setdefault("WEBFLOW_API_KEY", "test-webflow-key")
os.environ.setdefault("WEBFLOW_SKU_COLLECTION", "test-collection")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from unittest.mock import MagicMock
import requests

from config.settings import get_settings
from integrations.marianatek import MarianatekClient
from integrations.webflow import WebflowClient
from services.sync_log_service import SyncLogService
from services.sync_state_service import SyncStateStore
from services.throttle_service import SyncThrottle


# ===================
# SINGLETONS
# ===================

@pytest.fixture(autouse=True)
def reset_singletons():
    """Each test starts without cached settings, engine or scheduler."""
    import services.reconciliation_service as reconciliation_service
    import services.scheduler_service as scheduler_service

    get_settings.cache_clear()
    reconciliation_service._reconciliation_engine = None
    scheduler_service._sync_scheduler = None
    yield
    get_settings.cache_clear()
    reconciliation_service._reconciliation_engine = None
    scheduler_service._sync_scheduler = None


# ===================
# TIME
# ===================

class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_sleep() -> MagicMock:
    """Stand-in for time.sleep; records requested delays."""
    return MagicMock()


# ===================
# HTTP
# ===================

@pytest.fixture
def mock_session() -> MagicMock:
    """
    requests.Session whose responses are queued by the test.

    Usage:
        def test_something(mock_session):
            mock_session.request.side_effect = [ResponseFactory.create(...)]
    """
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def marianatek_client(mock_session, mock_sleep) -> MarianatekClient:
    return MarianatekClient(
        base_url="https://studio.test/api",
        api_key="mt-key",
        request_delay=0.3,
        session=mock_session,
        sleep=mock_sleep,
    )


@pytest.fixture
def webflow_client(mock_session, mock_sleep) -> WebflowClient:
    return WebflowClient(
        collection_id="coll-1",
        page_size=100,
        base_url="https://webflow.test/v2",
        api_key="wf-key",
        request_delay=0.3,
        session=mock_session,
        sleep=mock_sleep,
    )


# ===================
# SYNC COMPONENTS
# ===================

@pytest.fixture
def event_log(tmp_path) -> SyncLogService:
    return SyncLogService(tmp_path / "sync.log")


@pytest.fixture
def state_store(tmp_path) -> SyncStateStore:
    return SyncStateStore(tmp_path / "lastSynced.json")


@pytest.fixture
def throttle(fake_clock) -> SyncThrottle:
    """Three-minute throttle on the fake clock."""
    return SyncThrottle(180, clock=fake_clock)


# ===================
# API
# ===================

@pytest.fixture
def test_client():
    """
    FastAPI test client.

    The lifespan is not entered, so no scheduler thread starts.
    """
    from fastapi.testclient import TestClient
    from main import app
    return TestClient(app)
