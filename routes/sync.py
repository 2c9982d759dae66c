"""
Sync API routes.

Read-only view of the scheduler and persisted state, plus a manual
trigger for one cycle.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from services.scheduler_service import get_sync_scheduler
from services.reconciliation_service import get_reconciliation_engine
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("/status")
def get_sync_status():
    """Scheduler state and the outcome of the last cycle."""
    return get_sync_scheduler().status().model_dump(mode="json")


@router.get("/state")
def get_sync_state():
    """Last-synced quantities for every tracked pair."""
    snapshots = get_reconciliation_engine().state.all()
    return {
        "pairs": len(snapshots),
        "snapshots": {key: snap.model_dump() for key, snap in snapshots.items()},
    }


@router.post("/run")
def run_sync_now():
    """
    Run one cycle now.

    Returns 409 if a cycle is already running. A failed cycle is
    reported with its error; the schedule is not affected.
    """
    scheduler = get_sync_scheduler()
    try:
        result = scheduler.run_once(raise_if_busy=True)
    except Exception as e:
        return handle_error(e)

    if result is None:
        return {"status": "failed", "error": scheduler.last_error}

    return {"status": "completed", "result": result.model_dump(mode="json")}
