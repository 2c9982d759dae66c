"""
API tests for the sync routes and health check.

Run: pytest tests/test_sync_routes.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import MagicMock, patch

from models.sync import CycleResult, PairSnapshot, SchedulerStatus
from exceptions import SyncCycleInProgressError
from services.sync_state_service import SyncStateStore


@pytest.fixture
def mock_scheduler() -> MagicMock:
    scheduler = MagicMock()
    scheduler.status.return_value = SchedulerStatus(
        running=True,
        cycle_in_progress=False,
        interval_seconds=60,
        cycles_completed=3,
    )
    return scheduler


@pytest.fixture
def client(test_client, mock_scheduler):
    with patch("routes.sync.get_sync_scheduler", return_value=mock_scheduler):
        with patch("main.get_sync_scheduler", return_value=mock_scheduler):
            yield test_client


class TestSyncRoutes:
    """Tests for /api/sync endpoints."""

    def test_status(self, client):
        response = client.get("/api/sync/status")

        assert response.status_code == 200
        body = response.json()
        assert body["running"] is True
        assert body["cycles_completed"] == 3
        assert body["interval_seconds"] == 60

    def test_state(self, client, tmp_path):
        store = SyncStateStore(tmp_path / "state.json")
        store.record("B1|A1", PairSnapshot(webflow=9, marianatek=7))
        engine = MagicMock()
        engine.state = store

        with patch("routes.sync.get_reconciliation_engine", return_value=engine):
            response = client.get("/api/sync/state")

        assert response.status_code == 200
        assert response.json() == {
            "pairs": 1,
            "snapshots": {"B1|A1": {"webflow": 9, "marianatek": 7}},
        }

    def test_run_completed(self, client, mock_scheduler):
        now = datetime.now(timezone.utc)
        mock_scheduler.run_once.return_value = CycleResult(
            started_at=now, finished_at=now, mapping_entries=2, pairs_tracked=2
        )

        response = client.post("/api/sync/run")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["result"]["mapping_entries"] == 2
        mock_scheduler.run_once.assert_called_once_with(raise_if_busy=True)

    def test_run_failed(self, client, mock_scheduler):
        mock_scheduler.run_once.return_value = None
        mock_scheduler.last_error = "Invalid Webflow response structure"

        response = client.post("/api/sync/run")

        assert response.status_code == 200
        assert response.json() == {
            "status": "failed",
            "error": "Invalid Webflow response structure",
        }

    def test_run_conflict_when_busy(self, client, mock_scheduler):
        mock_scheduler.run_once.side_effect = SyncCycleInProgressError()

        response = client.post("/api/sync/run")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SYNC_IN_PROGRESS"


class TestHealth:
    """Tests for /health"""

    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["scheduler"]["cycles_completed"] == 3

    def test_degraded_after_failed_cycle(self, client, mock_scheduler):
        now = datetime.now(timezone.utc)
        mock_scheduler.status.return_value = SchedulerStatus(
            running=True,
            cycle_in_progress=False,
            interval_seconds=60,
            cycles_completed=1,
            cycles_failed=1,
            last_result=CycleResult(
                started_at=now - timedelta(minutes=2),
                finished_at=now - timedelta(minutes=2)
            ),
            last_error="boom",
            last_error_at=now,
        )

        response = client.get("/health")

        assert response.json()["status"] == "degraded"
