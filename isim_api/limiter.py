"""
============================================================================
FILE: limiter.py
LOCATION: isim_api/limiter.py
============================================================================

PURPOSE:
    Fixed-window request counters keyed by client IP or API key.

ROLE IN PROJECT:
    create_app() builds two RateLimiter instances (classification and
    catalogue) and keeps them on app.state, so every request handler shares
    the same counters and tests can reset them between runs.

KEY COMPONENTS:
    - RateLimiter: allow()/info()/reset() over a `limits` fixed window
    - RateLimitInfo: Remaining quota and seconds until the window resets
    - client_ip: Resolve the caller's address behind proxies

DEPENDENCIES:
    - External: limits (the engine behind slowapi), slowapi
    - Internal: None

USAGE:
    from isim_api.limiter import RateLimiter
    limiter = RateLimiter("10/minute")
    if not limiter.allow(client_ip(request)):
        ...
============================================================================
"""

import math
import time
from dataclasses import dataclass
from typing import Optional

from limits import RateLimitItem, RateLimitItemPerSecond, parse
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address
from starlette.requests import Request

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitInfo:
    limit: int
    remaining: int
    reset_in: int


class RateLimiter:
    """
    Fixed-window counter per key.

    The first request from a key opens a window of `window_seconds`; every
    request (accepted or not) increments the count, and a request is
    allowed while the count stays within `max_requests`. Counters live in
    process memory unless `storage_uri` points at a shared backend such as
    redis://.

    Example:
        limiter = RateLimiter("10/minute")
        limiter.allow("203.0.113.7")          # True for the first 10 calls
        limiter.info("203.0.113.7").remaining
    """

    def __init__(self, default_limit: str = "60/minute", storage_uri: str = "memory://"):
        self._default = parse(default_limit)
        self._storage = storage_from_string(storage_uri)
        self._strategy = FixedWindowRateLimiter(self._storage)

    @property
    def max_requests(self) -> int:
        return self._default.amount

    @property
    def window_seconds(self) -> int:
        return self._default.get_expiry()

    def _item(
        self,
        max_requests: Optional[int],
        window_seconds: Optional[int],
    ) -> RateLimitItem:
        if max_requests is None and window_seconds is None:
            return self._default
        return RateLimitItemPerSecond(
            max_requests if max_requests is not None else self.max_requests,
            window_seconds if window_seconds is not None else self.window_seconds,
        )

    def allow(
        self,
        key: Optional[str],
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ) -> bool:
        """Count one request for `key` and report whether it is within quota."""
        item = self._item(max_requests, window_seconds)
        return self._strategy.hit(item, key or UNKNOWN_CLIENT)

    def info(
        self,
        key: Optional[str],
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ) -> RateLimitInfo:
        """Remaining quota for `key` without counting a request."""
        item = self._item(max_requests, window_seconds)
        stats = self._strategy.get_window_stats(item, key or UNKNOWN_CLIENT)
        if stats.remaining >= item.amount:
            # No open window for this key
            return RateLimitInfo(item.amount, item.amount, item.get_expiry())
        reset_in = max(0, math.ceil(stats.reset_time - time.time()))
        return RateLimitInfo(item.amount, stats.remaining, reset_in)

    def reset(self) -> None:
        """Drop every counter (used between tests)."""
        self._storage.reset()


def client_ip(request: Request) -> str:
    """
    Resolve the caller's IP address.

    Order: first X-Forwarded-For entry, X-Real-IP, socket peer, "unknown".
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return get_remote_address(request)
    return UNKNOWN_CLIENT
