"""
Durable store of last-synced quantities per reconciliation key.

Snapshots are replaced wholesale per pair and written to disk at the
end of each completed cycle. Writes go to a temp file that is then
renamed over the state file, so a crash mid-write leaves the old file.
"""

import json
import os
import threading
from pathlib import Path
from typing import Optional, Union
import structlog
from pydantic import ValidationError

from exceptions import StateStoreError
from models.sync import PairSnapshot

logger = structlog.get_logger(__name__)


class SyncStateStore:
    """
    In-memory snapshot map with explicit load/save.

    Usage:
        store = SyncStateStore("lastSynced.json")
        store.load()
        store.record(key, PairSnapshot(webflow=10, marianatek=10))
        store.save()
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._snapshots: dict[str, PairSnapshot] = {}
        self._lock = threading.Lock()

    # ===================
    # LIFECYCLE
    # ===================

    def load(self) -> int:
        """
        Load snapshots from disk, replacing anything in memory.

        A missing file means no pair has been synced yet. Entries that
        fail validation are dropped.

        Returns:
            Number of snapshots loaded

        Raises:
            StateStoreError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            logger.info("sync_state_not_found", path=str(self.path))
            with self._lock:
                self._snapshots = {}
            return 0

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("sync_state_load_failed", path=str(self.path), error=str(e))
            raise StateStoreError(str(self.path), str(e)) from e

        if not isinstance(raw, dict):
            raise StateStoreError(str(self.path), "top-level JSON value must be an object")

        snapshots = {}
        for key, value in raw.items():
            try:
                snapshots[key] = PairSnapshot.model_validate(value)
            except ValidationError:
                logger.warning("sync_state_entry_dropped", key=key)

        with self._lock:
            self._snapshots = snapshots

        logger.info("sync_state_loaded", path=str(self.path), pairs=len(snapshots))
        return len(snapshots)

    def save(self) -> None:
        """
        Persist all snapshots atomically.

        Raises:
            StateStoreError: If the file cannot be written
        """
        with self._lock:
            payload = {key: snap.model_dump() for key, snap in self._snapshots.items()}

        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            logger.error("sync_state_save_failed", path=str(self.path), error=str(e))
            raise StateStoreError(str(self.path), str(e)) from e

        logger.debug("sync_state_saved", path=str(self.path), pairs=len(payload))

    # ===================
    # ACCESS
    # ===================

    def get(self, key: str) -> Optional[PairSnapshot]:
        """Snapshot for a key, or None if the pair was never processed."""
        with self._lock:
            return self._snapshots.get(key)

    def record(self, key: str, snapshot: PairSnapshot) -> None:
        """Replace the snapshot for a key."""
        with self._lock:
            self._snapshots[key] = snapshot

    def all(self) -> dict[str, PairSnapshot]:
        """Copy of every snapshot."""
        with self._lock:
            return dict(self._snapshots)

    def __len__(self) -> int:
        with self._lock:
            return len(self._snapshots)
