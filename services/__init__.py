"""
Business logic services.

Each service handles one part of the sync.
"""

from services.quantity_service import (
    extract_quantity,
    FoundOverride,
    FallbackUsed,
    Defaulted,
)
from services.mapping_service import MappingService
from services.sync_state_service import SyncStateStore
from services.throttle_service import SyncThrottle
from services.sync_log_service import SyncLogService
from services.reconciliation_service import (
    ReconciliationEngine,
    build_reconciliation_engine,
    get_reconciliation_engine,
)
from services.scheduler_service import SyncScheduler, get_sync_scheduler

__all__ = [
    "extract_quantity",
    "FoundOverride",
    "FallbackUsed",
    "Defaulted",
    "MappingService",
    "SyncStateStore",
    "SyncThrottle",
    "SyncLogService",
    "ReconciliationEngine",
    "build_reconciliation_engine",
    "get_reconciliation_engine",
    "SyncScheduler",
    "get_sync_scheduler",
]
