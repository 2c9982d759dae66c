"""
Periodic sync scheduler.

Runs one cycle immediately, then one every `interval_seconds` counted from
the end of the previous cycle. Cycles never overlap: a trigger that
arrives while one is running is skipped.
"""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional
import schedule
import structlog

from config.settings import get_settings
from exceptions import SyncCycleInProgressError
from models.sync import CycleResult, SchedulerStatus, SyncDirection, SyncStatus
from services.reconciliation_service import get_reconciliation_engine
from services.sync_log_service import SyncLogService

logger = structlog.get_logger(__name__)


class SyncScheduler:
    """
    Owns the cycle loop and the record of how cycles went.

    Usage:
        scheduler = SyncScheduler(engine.run_cycle, 60, engine.event_log)
        scheduler.start()      # background thread
        ...
        scheduler.stop()

        scheduler.run_forever()  # or block the current thread
    """

    def __init__(
        self,
        run_cycle: Callable[[], CycleResult],
        interval_seconds: int,
        event_log: SyncLogService,
        poll_seconds: float = 1.0,
    ):
        self._run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self.event_log = event_log
        self.poll_seconds = poll_seconds
        self.job_scheduler = schedule.Scheduler()

        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._running = False

        self.cycles_completed = 0
        self.cycles_failed = 0
        self.cycles_skipped = 0
        self.last_result: Optional[CycleResult] = None
        self.last_error: Optional[str] = None
        self.last_error_at: Optional[datetime] = None

    # ===================
    # CYCLES
    # ===================

    def run_once(self, raise_if_busy: bool = False) -> Optional[CycleResult]:
        """
        Run a single cycle unless one is already in flight.

        Cycle errors are logged and recorded, never raised, so the
        schedule keeps going.

        Args:
            raise_if_busy: Raise instead of silently skipping when busy

        Returns:
            CycleResult, or None if the cycle was skipped or failed

        Raises:
            SyncCycleInProgressError: If busy and raise_if_busy is set
        """
        if not self._cycle_lock.acquire(blocking=False):
            self.cycles_skipped += 1
            logger.warning("sync_cycle_skipped", reason="cycle_in_progress")
            if raise_if_busy:
                raise SyncCycleInProgressError()
            return None

        try:
            result = self._run_cycle()
        except Exception as e:
            self.cycles_failed += 1
            self.last_error = str(e)
            self.last_error_at = datetime.now(timezone.utc)
            logger.error(
                "sync_cycle_failed",
                error=str(e),
                error_type=type(e).__name__
            )
            self.event_log.log(SyncDirection.SYSTEM, "GLOBAL", SyncStatus.ERROR, str(e))
            return None
        finally:
            self._cycle_lock.release()

        self.cycles_completed += 1
        self.last_result = result
        return result

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_lock.locked()

    # ===================
    # LOOP
    # ===================

    def run_forever(self) -> None:
        """Block, running cycles until stop() is called."""
        self._running = True
        logger.info("sync_scheduler_started", interval_seconds=self.interval_seconds)

        try:
            self.run_once()

            self.job_scheduler.clear()
            self.job_scheduler.every(self.interval_seconds).seconds.do(self.run_once)

            while not self._stop_event.is_set():
                self.job_scheduler.run_pending()
                self._stop_event.wait(self.poll_seconds)
        finally:
            self._running = False
            logger.info("sync_scheduler_stopped")

    def start(self) -> None:
        """Run the loop on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("sync_scheduler_already_running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run_forever,
            name="sync-scheduler",
            daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the loop to exit; waits for the thread if one was started."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    # ===================
    # STATUS
    # ===================

    def status(self) -> SchedulerStatus:
        """Current scheduler state."""
        return SchedulerStatus(
            running=self._running,
            cycle_in_progress=self.cycle_in_progress,
            interval_seconds=self.interval_seconds,
            cycles_completed=self.cycles_completed,
            cycles_failed=self.cycles_failed,
            cycles_skipped=self.cycles_skipped,
            last_result=self.last_result,
            last_error=self.last_error,
            last_error_at=self.last_error_at,
        )


# Singleton instance for convenience
_sync_scheduler: Optional[SyncScheduler] = None


def get_sync_scheduler() -> SyncScheduler:
    """Get or create the SyncScheduler instance."""
    global _sync_scheduler
    if _sync_scheduler is None:
        engine = get_reconciliation_engine()
        _sync_scheduler = SyncScheduler(
            engine.run_cycle,
            get_settings().sync_interval_seconds,
            engine.event_log,
        )
    return _sync_scheduler
