"""
Request Governor
================

Per-identity sliding-window admission control (in-memory, per process).
"""

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

DEFAULT_LIMIT = 10
DEFAULT_WINDOW_SECONDS = 15 * 60


class RequestGovernor:
    """Admit at most ``limit`` requests per identity within ``window_seconds``.

    The prune/compare/record sequence for an identity runs under one lock,
    so two concurrent requests can never both take the last slot.
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Deque[float]] = {}

    def _prune(self, window: Deque[float], now: float) -> None:
        while window and now - window[0] >= self.window_seconds:
            window.popleft()

    def admit(self, identity: str) -> bool:
        """Record and admit the request, or return False if over the limit."""
        with self._lock:
            now = self._clock()
            window = self._windows.get(identity)
            if window is None:
                window = deque(maxlen=self.limit)
                self._windows[identity] = window

            self._prune(window, now)
            if len(window) >= self.limit:
                return False

            window.append(now)
            return True

    def remaining(self, identity: str) -> int:
        """Admissions left for ``identity`` in the current window"""
        with self._lock:
            window = self._windows.get(identity)
            if window is None:
                return self.limit
            self._prune(window, self._clock())
            return self.limit - len(window)

    def retry_after(self, identity: str) -> Optional[float]:
        """Seconds until the next admission is possible, None if it already is"""
        with self._lock:
            window = self._windows.get(identity)
            if window is None:
                return None
            now = self._clock()
            self._prune(window, now)
            if len(window) < self.limit:
                return None
            return max(0.0, self.window_seconds - (now - window[0]))

    def sweep(self) -> int:
        """Drop identities with no admissions left in their window.

        Returns the number of identities removed.
        """
        with self._lock:
            now = self._clock()
            stale = []
            for identity, window in self._windows.items():
                self._prune(window, now)
                if not window:
                    stale.append(identity)
            for identity in stale:
                del self._windows[identity]
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
