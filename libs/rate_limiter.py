"""
Fixed-window, per-client request limiter exposed as a FastAPI dependency.
"""

import logging
import threading
import time
from typing import Callable, Dict, Optional

from fastapi import HTTPException, Request, status

from libs.config import config

logger = logging.getLogger(__name__)


def get_client_key(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer, else 'unknown'."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimiter:
    """
    Counts requests per client inside a fixed window.

    A client's window starts at its first request; once the window has
    elapsed the next request opens a new one. Entries idle for two windows
    are pruned on access.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self.window_seconds:
            return
        stale = [
            key
            for key, entry in self._entries.items()
            if now - entry["start"] > self.window_seconds * 2
        ]
        for key in stale:
            del self._entries[key]
        self._last_prune = now

    def hit(self, key: str) -> bool:
        """
        Register one request for ``key``.

        Returns:
            True if the request is allowed, False if the client is over the limit
        """
        now = self._clock()
        with self._lock:
            self._prune(now)
            entry = self._entries.get(key)
            if entry is None or now - entry["start"] > self.window_seconds:
                self._entries[key] = {"count": 1, "start": now}
                return True
            entry["count"] += 1
            return entry["count"] <= self.max_requests

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    async def __call__(self, request: Request) -> None:
        key = get_client_key(request)
        if not self.hit(key):
            logger.info("Rate limit exceeded for client %s on %s", key, request.url.path)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail={"error": "rate_limited"},
            )


# Singleton instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the process-wide rate limiter"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(
            max_requests=config.RATE_LIMIT_MAX,
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
        )
    return _rate_limiter


async def rate_limit(request: Request) -> None:
    """FastAPI dependency applying the process-wide limiter."""
    await get_rate_limiter()(request)
