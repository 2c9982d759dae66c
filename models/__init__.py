"""
Pydantic models for the inventory sync.
"""

from models.base import BaseSchema
from models.mapping import MappingEntry, MappingIndex, reconciliation_key
from models.sync import (
    SyncDirection,
    SyncStatus,
    PairSnapshot,
    SyncEvent,
    PassResult,
    CycleResult,
    SchedulerStatus,
)

__all__ = [
    "BaseSchema",
    "MappingEntry",
    "MappingIndex",
    "reconciliation_key",
    "SyncDirection",
    "SyncStatus",
    "PairSnapshot",
    "SyncEvent",
    "PassResult",
    "CycleResult",
    "SchedulerStatus",
]
