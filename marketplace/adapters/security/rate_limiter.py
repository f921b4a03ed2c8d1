# marketplace/adapters/security/rate_limiter.py
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Tuple

from marketplace.core.domain.exceptions import RateLimitError


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window request counter keyed by an arbitrary identifier.

    One instance lives in the DI container per process; tests build their
    own with a fake clock. Expired windows are swept on access at most once
    per window length, so the table only holds recently seen identifiers.
    """

    def __init__(
        self,
        window_seconds: float = 60,
        max_requests: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = Lock()
        self._next_sweep = clock() + window_seconds

    def tracked(self) -> int:
        """Number of identifiers currently holding a window."""
        with self._lock:
            return len(self._windows)

    def _drop_expired(self, now: float) -> int:
        expired = [key for key, w in self._windows.items() if now > w.reset_at]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def is_allowed(self, identifier: str) -> bool:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._drop_expired(now)
                self._next_sweep = now + self.window_seconds

            window = self._windows.get(identifier)
            if window is None or now > window.reset_at:
                self._windows[identifier] = _Window(count=1, reset_at=now + self.window_seconds)
                return True
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def remaining(self, identifier: str) -> Tuple[int, float]:
        """``(requests left, seconds until the window resets)``."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(identifier)
            if window is None or now > window.reset_at:
                return self.max_requests, self.window_seconds
            return max(0, self.max_requests - window.count), window.reset_at - now

    def hit(self, identifier: str) -> None:
        if not self.is_allowed(identifier):
            _, retry_after = self.remaining(identifier)
            raise RateLimitError(
                f"Rate limit exceeded. Try again in {int(retry_after) + 1}s",
                details={"retryAfter": int(retry_after) + 1},
            )

    def cleanup(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._drop_expired(now)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
