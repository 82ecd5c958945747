"""Cached collection counts."""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta


@dataclass
class CountCache:
    """A single cached count with a time-to-live.

    ``get_or_refresh`` recomputes the value under a lock so concurrent callers
    share one refresh.
    """

    ttl_seconds: int
    value: int | None = None
    last_refreshed: datetime | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def get(self) -> int | None:
        """Return the cached count if present and not expired."""
        if self.value is None or self.last_refreshed is None:
            return None
        age = datetime.now(tz=UTC) - self.last_refreshed
        if age >= timedelta(seconds=self.ttl_seconds):
            return None
        return self.value

    def set(self, value: int) -> None:
        """Store a freshly computed count."""
        self.value = value
        self.last_refreshed = datetime.now(tz=UTC)

    def get_or_refresh(self, compute: Callable[[], int]) -> int:
        """Return the cached count, computing it when missing or expired."""
        cached = self.get()
        if cached is not None:
            return cached
        with self._lock:
            cached = self.get()
            if cached is not None:
                return cached
            value = compute()
            self.set(value)
            return value

    def adjust(self, delta: int) -> None:
        """Shift a live cached count after a local write."""
        with self._lock:
            if self.value is None:
                return
            self.value = max(0, self.value + delta)
            self.last_refreshed = datetime.now(tz=UTC)

    def invalidate(self) -> None:
        """Drop the cached count."""
        with self._lock:
            self.value = None
            self.last_refreshed = None
