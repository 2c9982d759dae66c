"""
Sync state and reporting schemas.

PairSnapshot is what gets persisted per reconciliation key; the rest
describe what a cycle did.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import Field

from models.base import BaseSchema


class SyncDirection(str, Enum):
    """Category written to the sync event log."""

    MARIANATEK_TO_WEBFLOW = "Marianatek→Webflow"  # Restocks
    WEBFLOW_TO_MARIANATEK = "Webflow→Marianatek"  # Sales
    API = "API"
    SYSTEM = "SYSTEM"
    INFO = "INFO"


class SyncStatus(str, Enum):
    """Outcome recorded for a sync event."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    RETRY = "RETRY"
    WARNING = "WARNING"
    INFO = "INFO"


class PairSnapshot(BaseSchema):
    """Last quantities recorded on both sides for one pair."""

    webflow: int = Field(
        ...,
        ge=0,
        description="Webflow quantity observed in the last processing"
    )
    marianatek: int = Field(
        ...,
        ge=0,
        description="Marianatek quantity observed in the last processing"
    )


class SyncEvent(BaseSchema):
    """One line of the append-only sync log."""

    timestamp: datetime
    direction: SyncDirection
    entity_id: str
    status: SyncStatus
    message: str

    def to_line(self) -> str:
        """Format as a sync log line."""
        return (
            f"{self.timestamp.isoformat()} | {self.direction.value} | "
            f"Variant: {self.entity_id} | {self.status.value} | {self.message}"
        )


class PassResult(BaseSchema):
    """Counters for one directional pass."""

    direction: SyncDirection
    fetched: int = 0
    processed: int = 0
    pushed: int = 0
    skipped_unmapped: int = 0
    skipped_throttled: int = 0
    errors: list[dict] = Field(default_factory=list)


class CycleResult(BaseSchema):
    """Summary of one complete cycle (both passes)."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    mapping_entries: int = 0
    passes: list[PassResult] = Field(default_factory=list)
    pairs_tracked: int = 0


class SchedulerStatus(BaseSchema):
    """Snapshot of scheduler state for the status endpoint."""

    running: bool
    cycle_in_progress: bool
    interval_seconds: int
    cycles_completed: int = 0
    cycles_failed: int = 0
    cycles_skipped: int = 0
    last_result: Optional[CycleResult] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None
