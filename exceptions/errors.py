"""
Custom exception classes for the application.

Remote failures are split into retryable (rate limit, HTTP 500) and
permanent ones; see integrations/resilience.py for the retry policy.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "WEBFLOW_RATE_LIMITED")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.service = service
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# REMOTE API ERRORS
# ===================

class RemoteApiError(ExternalServiceError):
    """
    Remote call failed permanently.

    Auth, not-found and malformed-request responses land here and are
    never retried.
    """

    def __init__(
        self,
        service: str,
        message: str,
        http_status: Optional[int] = None,
        code: Optional[str] = None
    ):
        self.http_status = http_status
        super().__init__(
            service=service,
            message=message,
            code=code,
            details={"http_status": http_status}
        )


class RateLimitedError(RemoteApiError):
    """Remote system answered 429."""

    def __init__(self, service: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(
            service=service,
            message=f"{service} rate limit hit",
            http_status=429,
            code=f"{service.upper()}_RATE_LIMITED"
        )
        self.details["retry_after"] = retry_after


class TransientServerError(RemoteApiError):
    """Remote system answered 500."""

    def __init__(self, service: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(
            service=service,
            message=f"{service} internal server error",
            http_status=500,
            code=f"{service.upper()}_SERVER_ERROR"
        )


class MalformedResponseError(ExternalServiceError):
    """Response is missing required data or pagination fields."""

    def __init__(self, service: str, message: str):
        super().__init__(
            service=service,
            message=message,
            code=f"{service.upper()}_MALFORMED_RESPONSE"
        )


# ===================
# SYNC ERRORS
# ===================

class PerEntitySyncError(AppError):
    """Sync of a single mapped entity failed; the pass continues."""

    def __init__(self, direction: str, entity_id: str, message: str):
        super().__init__(
            code="ENTITY_SYNC_FAILED",
            message=message,
            status_code=500,
            details={"direction": direction, "entity_id": entity_id}
        )


class MappingSourceError(AppError):
    """Variant mapping could not be loaded."""

    def __init__(self, path: str, message: str):
        super().__init__(
            code="MAPPING_SOURCE_ERROR",
            message=f"Cannot load variant mapping: {message}",
            status_code=500,
            details={"path": path}
        )


class StateStoreError(AppError):
    """Sync state file could not be read or written."""

    def __init__(self, path: str, message: str):
        super().__init__(
            code="STATE_STORE_ERROR",
            message=f"Sync state store failure: {message}",
            status_code=500,
            details={"path": path}
        )


class SyncCycleInProgressError(ConflictError):
    """A sync cycle is already running."""

    def __init__(self):
        super().__init__(
            code="SYNC_IN_PROGRESS",
            message="A sync cycle is already running"
        )
