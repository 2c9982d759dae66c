"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ConflictError,
    ExternalServiceError,

    # Remote APIs
    RemoteApiError,
    RateLimitedError,
    TransientServerError,
    MalformedResponseError,

    # Sync
    PerEntitySyncError,
    MappingSourceError,
    StateStoreError,
    SyncCycleInProgressError,
)

__all__ = [
    # Base
    "AppError",
    "ConflictError",
    "ExternalServiceError",

    # Remote APIs
    "RemoteApiError",
    "RateLimitedError",
    "TransientServerError",
    "MalformedResponseError",

    # Sync
    "PerEntitySyncError",
    "MappingSourceError",
    "StateStoreError",
    "SyncCycleInProgressError",
]
