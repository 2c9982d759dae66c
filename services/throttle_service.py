"""
Per-pair sync cooldown.

Memory only; a restart forgets every cooldown.
"""

import time
from typing import Callable


class SyncThrottle:
    """
    Tracks the last sync of each reconciliation key.

    A key may sync again only once more than `window_seconds` have passed,
    whichever direction synced it last.
    """

    def __init__(self, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_sync: dict[str, float] = {}

    def can_sync(self, key: str) -> bool:
        last = self._last_sync.get(key)
        if last is None:
            return True
        return (self._clock() - last) > self.window_seconds

    def mark(self, key: str) -> None:
        """Start the cooldown for a key."""
        self._last_sync[key] = self._clock()

    def remaining(self, key: str) -> float:
        """Seconds until the key may sync again (0 when allowed)."""
        last = self._last_sync.get(key)
        if last is None:
            return 0.0
        return max(0.0, self.window_seconds - (self._clock() - last))
