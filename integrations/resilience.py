"""
Retry wrapper for remote API calls.

Rate-limited (429) and transient server (500) failures are retried a
bounded number of times, waiting for the server's Retry-After when it
sends one. Everything else fails fast.
"""

import time
from typing import Callable, Optional, TypeVar, TYPE_CHECKING
import structlog
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt

from exceptions import RateLimitedError, TransientServerError
from models.sync import SyncDirection, SyncStatus

if TYPE_CHECKING:
    from services.sync_log_service import SyncLogService

logger = structlog.get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (RateLimitedError, TransientServerError)
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY_SECONDS = 1


def retry_delay(error: BaseException) -> float:
    """Seconds to wait before retrying after `error`."""
    retry_after = getattr(error, "retry_after", None)
    if retry_after is None or retry_after < 0:
        return DEFAULT_RETRY_DELAY_SECONDS
    return float(retry_after)


def call_with_retry(
    fn: Callable[[], T],
    retries: int = DEFAULT_RETRIES,
    correlation_id: str = "GLOBAL",
    event_log: Optional["SyncLogService"] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run `fn`, retrying rate-limited and 500 responses.

    Args:
        fn: Zero-argument callable performing the remote call
        retries: Maximum retries after the first attempt
        correlation_id: Identifier attached to retry logs (variant id, PAGE-n, ...)
        event_log: Optional sync log receiving RETRY events
        sleep: Sleep function (injected in tests)

    Returns:
        Whatever `fn` returns

    Raises:
        RateLimitedError / TransientServerError: When retries are exhausted
        Exception: Any other error from `fn`, immediately
    """

    def wait_for_server(retry_state: RetryCallState) -> float:
        return retry_delay(retry_state.outcome.exception())

    def log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep
        http_status = getattr(error, "http_status", None)
        logger.warning(
            "api_call_retrying",
            correlation_id=correlation_id,
            attempt=retry_state.attempt_number,
            http_status=http_status,
            delay_seconds=delay
        )
        if event_log is not None:
            event_log.log(
                SyncDirection.API,
                correlation_id,
                SyncStatus.RETRY,
                f"Retrying after {int(delay * 1000)}ms due to {http_status}"
            )

    retrying = Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_for_server,
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=log_retry,
        sleep=sleep,
        reraise=True,
    )
    return retrying(fn)
