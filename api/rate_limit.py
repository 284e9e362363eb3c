"""Fixed-window, per-client request limiting for the chat endpoint."""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests, please try again later."


@dataclass
class Window:
    started: float
    count: int = 0


class RateLimiter:
    """Allows `limit` requests per client in every `window_seconds` window."""

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> tuple[bool, int, float]:
        """Count one request for key.

        Returns:
            (allowed, remaining, seconds until the window resets)
        """
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started >= self.window_seconds:
                window = Window(started=now)
                self._windows[key] = window
                self._prune(now)
            window.count += 1
            remaining = max(self.limit - window.count, 0)
            reset = window.started + self.window_seconds - now
            return window.count <= self.limit, remaining, reset

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now - w.started >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    async def __call__(self, request: Request) -> None:
        """FastAPI dependency: raise 429 once a client exhausts its window."""
        key = request.client.host if request.client else "anonymous"
        allowed, remaining, reset = self.hit(key)
        if not allowed:
            logger.warning("Rate limit exceeded for %s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=TOO_MANY_REQUESTS,
                headers={
                    "RateLimit-Limit": str(self.limit),
                    "RateLimit-Remaining": str(remaining),
                    "RateLimit-Reset": str(math.ceil(reset)),
                },
            )
