"""
Append-only sync event log.

Every reconciliation outcome (push, retry, warning, error) is written as
one line to the sync log file and mirrored to structlog.
"""

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Union
import structlog

from models.sync import SyncDirection, SyncEvent, SyncStatus

logger = structlog.get_logger(__name__)

_LOG_METHODS = {
    SyncStatus.SUCCESS: "info",
    SyncStatus.INFO: "info",
    SyncStatus.RETRY: "warning",
    SyncStatus.WARNING: "warning",
    SyncStatus.ERROR: "error",
}


class SyncLogService:
    """
    Writes sync events to the append-only log.

    Lines look like:
        2026-01-05T10:00:00+00:00 | Webflow→Marianatek | Variant: sku-1 | SUCCESS | Adjusted ...
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def log(
        self,
        direction: SyncDirection,
        entity_id: object,
        status: SyncStatus,
        message: str
    ) -> SyncEvent:
        """
        Record one event.

        Args:
            direction: Pass or category (e.g. SYSTEM, API)
            entity_id: Variant/item id, or a correlation id like PAGE-2
            status: Outcome
            message: Free text

        Returns:
            The recorded SyncEvent
        """
        event = SyncEvent(
            timestamp=datetime.now(timezone.utc),
            direction=direction,
            entity_id=str(entity_id),
            status=status,
            message=message,
        )

        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(event.to_line() + "\n")

        log_method = getattr(logger, _LOG_METHODS[status])
        log_method(
            "sync_event",
            direction=direction.value,
            entity_id=event.entity_id,
            status=status.value,
            message=message
        )
        return event

