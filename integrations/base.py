"""
Shared HTTP plumbing for the Marianatek and Webflow clients.

Translates HTTP failures into the app's exception taxonomy and routes
every request through the retry wrapper.
"""

import time
from typing import Any, Callable, Optional, TYPE_CHECKING
import requests
import structlog

from exceptions import (
    RemoteApiError,
    RateLimitedError,
    TransientServerError,
    MalformedResponseError,
)
from integrations.resilience import call_with_retry, DEFAULT_RETRIES

if TYPE_CHECKING:
    from services.sync_log_service import SyncLogService

logger = structlog.get_logger(__name__)


def parse_retry_after(response: requests.Response) -> Optional[int]:
    """Retry-After header in whole seconds, or None if absent/unparseable."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class ApiClient:
    """
    Base class for bearer-token JSON APIs.

    Subclasses set `service_name` and call `_request()`.
    """

    service_name = "api"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10,
        max_retries: int = DEFAULT_RETRIES,
        request_delay: float = 0.3,
        event_log: Optional["SyncLogService"] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.request_delay = request_delay
        self.event_log = event_log
        self.sleep = sleep
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    def _request(
        self,
        method: str,
        path: str,
        correlation_id: str,
        **kwargs: Any
    ) -> dict:
        """
        Perform a request with retries.

        Args:
            method: HTTP method
            path: Path relative to base_url
            correlation_id: Identifier for retry logs
            **kwargs: Passed to requests (params, json, headers)

        Returns:
            Decoded JSON object ({} for empty bodies)
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        return call_with_retry(
            lambda: self._send(method, url, **kwargs),
            retries=self.max_retries,
            correlation_id=correlation_id,
            event_log=self.event_log,
            sleep=self.sleep,
        )

    def _send(self, method: str, url: str, **kwargs: Any) -> dict:
        """Single attempt; raises the matching AppError on failure."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(
                "api_request_failed",
                service=self.service_name,
                method=method,
                url=url,
                error=str(e),
                error_type=type(e).__name__
            )
            raise RemoteApiError(self.service_name, f"{self.service_name} request failed: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimitedError(self.service_name, parse_retry_after(response))
        if status == 500:
            raise TransientServerError(self.service_name, parse_retry_after(response))
        if status >= 400:
            logger.error(
                "api_request_rejected",
                service=self.service_name,
                method=method,
                url=url,
                http_status=status
            )
            raise RemoteApiError(
                self.service_name,
                f"{self.service_name} returned {status}: {response.text[:200]}",
                http_status=status
            )

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(self.service_name, "Response body is not JSON") from e
        if not isinstance(body, dict):
            raise MalformedResponseError(self.service_name, "Response body is not a JSON object")
        return body

    def pause(self) -> None:
        """Fixed delay between consecutive requests."""
        if self.request_delay > 0:
            self.sleep(self.request_delay)
