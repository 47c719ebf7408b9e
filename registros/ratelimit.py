"""
Request throttling for record creation.

Counters live in the Django cache, one key per client per window. ``add``
opens a window without touching a running one and ``incr`` bumps the count
atomically, so concurrent requests cannot undercount. With the default
local-memory cache the state is process-local and resets on restart; point
``CACHES`` at a shared backend to coordinate several instances.
"""

import logging
import time
from typing import Optional

from django.conf import settings
from django.core.cache import cache as default_cache
from rest_framework.throttling import BaseThrottle

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "ratelimit:"
DEFAULT_WINDOW = 15 * 60  # seconds
DEFAULT_MAX_REQUESTS = 30


def get_client_ident(request) -> str:
    """
    Identify the caller the same way DRF throttles do.

    With ``NUM_PROXIES = 0`` this is REMOTE_ADDR; X-Forwarded-For is only
    read when trusted proxy hops are configured.
    """
    return BaseThrottle().get_ident(request)


class RateLimiter:
    """Fixed-window counter: at most ``max_requests`` per ``window`` seconds per key."""

    def __init__(
        self,
        scope: str,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window: int = DEFAULT_WINDOW,
        cache=None,
    ):
        self.scope = scope
        self.max_requests = max_requests
        self.window = window
        self.cache = cache if cache is not None else default_cache

    @classmethod
    def from_settings(cls, scope: str) -> "RateLimiter":
        config = getattr(settings, "REGISTRY_RATE_LIMIT", {})
        return cls(
            scope,
            max_requests=config.get("max_requests", DEFAULT_MAX_REQUESTS),
            window=config.get("window", DEFAULT_WINDOW),
        )

    def _keys(self, key: str):
        base = f"{CACHE_KEY_PREFIX}{self.scope}:{key}"
        return f"{base}:count", f"{base}:start"

    def _open_window(self, count_key: str, start_key: str) -> int:
        """Start a window, or join one a concurrent request opened first."""
        if self.cache.add(count_key, 1, self.window):
            self.cache.set(start_key, time.time(), self.window)
            return 1
        return self.cache.incr(count_key)

    def check(self, key: str) -> bool:
        """Count one request for ``key``; return whether it is within the limit."""
        count_key, start_key = self._keys(key)
        if self.cache.add(count_key, 1, self.window):
            self.cache.set(start_key, time.time(), self.window)
            count = 1
        else:
            try:
                count = self.cache.incr(count_key)
            except ValueError:
                # Window expired between add() and incr(); start a new one.
                count = self._open_window(count_key, start_key)

        allowed = count <= self.max_requests
        if not allowed:
            logger.warning(
                f"Rate limit exceeded for {key} on {self.scope}: "
                f"{count}/{self.max_requests} in {self.window}s window"
            )
        return allowed

    def retry_after(self, key: str) -> Optional[float]:
        """Seconds until the current window for ``key`` closes, if one is open."""
        _, start_key = self._keys(key)
        started = self.cache.get(start_key)
        if started is None:
            return None
        return max(0.0, self.window - (time.time() - started))

    def reset(self, key: str) -> None:
        self.cache.delete_many(self._keys(key))


class RegistroCreateThrottle(BaseThrottle):
    """DRF throttle gating record creation through a RateLimiter."""

    scope = "registro-create"

    def __init__(self):
        self.limiter = RateLimiter.from_settings(self.scope)
        self.key = None

    def allow_request(self, request, view):
        self.key = get_client_ident(request)
        return self.limiter.check(self.key)

    def wait(self):
        if self.key is None:
            return None
        return self.limiter.retry_after(self.key)
