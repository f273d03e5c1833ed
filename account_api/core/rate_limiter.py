from __future__ import annotations

import threading
import time
from typing import Dict, Iterable, Tuple

from fastapi import HTTPException, Request


class RateLimiter:
    """Fixed-window request counter keyed by scope and client address.

    Expired windows are evicted on every check, so the table only holds
    clients seen within the last window.
    """

    def __init__(self, clock=time.monotonic) -> None:
        self._windows: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def __len__(self) -> int:
        return len(self._windows)

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (_count, reset_at) in self._windows.items() if reset_at <= now]
        for key in expired:
            del self._windows[key]

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        if limit <= 0:
            return
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            count, reset_at = self._windows.get(key, (0, now + window_seconds))
            count += 1
            self._windows[key] = (count, reset_at)
        if count > limit:
            raise HTTPException(429, "Too many requests. Try again shortly.")


def client_address(request: Request, trusted_proxies: Iterable[str] = ()) -> str:
    """Peer address, or the first X-Forwarded-For hop when the peer is a trusted proxy."""
    peer = request.client.host if request.client and request.client.host else "unknown"
    if peer in set(trusted_proxies):
        forwarded = (request.headers.get("x-forwarded-for") or "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return peer


def rate_limit_ip(request: Request, scope: str, *, limit: int, window_seconds: int) -> None:
    state = getattr(request.app, "state", None)
    limiter = getattr(state, "rate_limiter", None)
    if limiter is None:
        raise RuntimeError("RateLimiter not configured")
    settings = getattr(state, "settings", None)
    trusted = settings.trusted_proxies if settings else ()
    limiter.check(f"{scope}:{client_address(request, trusted)}", limit, window_seconds)
