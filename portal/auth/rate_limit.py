"""
Fixed-window, in-memory request limiter keyed by client address.
"""
import logging
import threading
import time
from typing import Callable, Dict, Tuple

from flask import request

from portal.errors import RateLimitedError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allows ``max_requests`` per key in each ``window_seconds`` window."""

    def __init__(self, max_requests: int, window_seconds: int,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> None:
        """
        Count one request for ``key``.

        Raises:
            RateLimitedError: if the key has used up its window
        """
        now = self._clock()
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            self._prune(now)

        if count > self.max_requests:
            retry_after = max(1, int(self.window_seconds - (now - started)))
            logger.warning(f"Rate limit exceeded for {key} ({count}/{self.max_requests})")
            raise RateLimitedError(retry_after=retry_after)

    def _prune(self, now: float) -> None:
        expired = [k for k, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def limit_request(self) -> None:
        """``before_request``-style hook keyed by the caller's address."""
        self.hit(request.remote_addr or "unknown")
