"""
Unit tests for SyncStateStore.

Run: pytest tests/unit/test_sync_state_service.py -v
"""

import json

import pytest
from unittest.mock import patch

from services.sync_state_service import SyncStateStore
from models.sync import PairSnapshot
from exceptions import StateStoreError


class TestSyncStateStoreLoad:
    """Tests for SyncStateStore.load()"""

    def test_missing_file_is_empty(self, state_store):
        assert state_store.load() == 0
        assert len(state_store) == 0

    def test_loads_snapshots(self, state_store):
        state_store.path.write_text(json.dumps({
            "B1|A1": {"webflow": 10, "marianatek": 10},
            "B2|A2": {"webflow": 3, "marianatek": 5},
        }), encoding="utf-8")

        assert state_store.load() == 2
        assert state_store.get("B2|A2") == PairSnapshot(webflow=3, marianatek=5)

    def test_invalid_entries_dropped(self, state_store):
        """Bad entries are skipped, the rest load."""
        state_store.path.write_text(json.dumps({
            "B1|A1": {"webflow": 10, "marianatek": 10},
            "B2|A2": {"webflow": "ten"},
            "B3|A3": {"webflow": -1, "marianatek": 2},
        }), encoding="utf-8")

        assert state_store.load() == 1
        assert state_store.get("B2|A2") is None
        assert state_store.get("B3|A3") is None

    def test_corrupt_file_raises(self, state_store):
        state_store.path.write_text("{broken", encoding="utf-8")

        with pytest.raises(StateStoreError):
            state_store.load()

    def test_non_object_raises(self, state_store):
        state_store.path.write_text("[]", encoding="utf-8")

        with pytest.raises(StateStoreError):
            state_store.load()

    def test_load_replaces_memory(self, state_store):
        state_store.record("B9|A9", PairSnapshot(webflow=1, marianatek=1))

        state_store.load()

        assert state_store.get("B9|A9") is None


class TestSyncStateStoreSave:
    """Tests for SyncStateStore.save()"""

    def test_round_trip(self, state_store):
        state_store.record("B1|A1", PairSnapshot(webflow=10, marianatek=7))
        state_store.save()

        reloaded = SyncStateStore(state_store.path)
        reloaded.load()

        assert reloaded.all() == {"B1|A1": PairSnapshot(webflow=10, marianatek=7)}

    def test_file_format(self, state_store):
        """On-disk format is {key: {"webflow": n, "marianatek": n}}."""
        state_store.record("B1|A1", PairSnapshot(webflow=9, marianatek=7))

        state_store.save()

        assert json.loads(state_store.path.read_text(encoding="utf-8")) == {
            "B1|A1": {"webflow": 9, "marianatek": 7}
        }

    def test_no_temp_file_left(self, state_store):
        state_store.record("B1|A1", PairSnapshot(webflow=1, marianatek=1))

        state_store.save()

        assert [p.name for p in state_store.path.parent.iterdir()] == ["lastSynced.json"]

    def test_creates_parent_directory(self, tmp_path):
        store = SyncStateStore(tmp_path / "data" / "state.json")
        store.record("B1|A1", PairSnapshot(webflow=1, marianatek=1))

        store.save()

        assert store.path.exists()

    def test_failed_write_keeps_previous_file(self, state_store):
        """A write that dies midway leaves the old state intact."""
        state_store.record("B1|A1", PairSnapshot(webflow=10, marianatek=10))
        state_store.save()
        state_store.record("B1|A1", PairSnapshot(webflow=2, marianatek=2))

        with patch("services.sync_state_service.json.dump", side_effect=OSError("disk full")):
            with pytest.raises(StateStoreError):
                state_store.save()

        assert json.loads(state_store.path.read_text(encoding="utf-8")) == {
            "B1|A1": {"webflow": 10, "marianatek": 10}
        }

    def test_record_replaces_wholesale(self, state_store):
        state_store.record("B1|A1", PairSnapshot(webflow=10, marianatek=10))
        state_store.record("B1|A1", PairSnapshot(webflow=9, marianatek=7))

        assert state_store.get("B1|A1") == PairSnapshot(webflow=9, marianatek=7)
        assert len(state_store) == 1
