"""
Marianatek Webflow Inventory Sync - Main Application

FastAPI application entry point. The sync scheduler runs on a background
thread for the lifetime of the app.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime, timezone

from config import get_settings, configure_logging
from services.scheduler_service import get_sync_scheduler

settings = get_settings()

# Configure structured logging
configure_logging(settings)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Load state and start the scheduler
    Shutdown: Stop the scheduler
    """
    # Startup
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        scheduler_enabled=settings.scheduler_enabled
    )

    scheduler = get_sync_scheduler()
    if settings.scheduler_enabled:
        scheduler.start()

    yield

    # Shutdown
    logger.info("application_shutting_down")
    scheduler.stop(timeout=settings.request_timeout_seconds)


# Create FastAPI app
app = FastAPI(
    title="Marianatek Webflow Inventory Sync",
    description="Two-way stock reconciliation between Marianatek and Webflow",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and scheduler state
    """
    status = get_sync_scheduler().status()

    # Degraded while the most recent cycle is a failed one
    degraded = status.last_error_at is not None and (
        status.last_result is None
        or status.last_result.finished_at < status.last_error_at
    )

    return {
        "status": "degraded" if degraded else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "scheduler": {
            "running": status.running,
            "cycle_in_progress": status.cycle_in_progress,
            "cycles_completed": status.cycles_completed,
            "cycles_failed": status.cycles_failed,
        }
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Marianatek Webflow Inventory Sync API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "status": "/api/sync/status",
            "state": "/api/sync/state",
            "run": "/api/sync/run"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.sync import router as sync_router

app.include_router(sync_router, prefix="/api/sync", tags=["Sync"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
