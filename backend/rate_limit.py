from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

TOO_MANY_REQUESTS = "Too many requests from this IP, please try again later."


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_after: float


class RateLimitExceeded(Exception):
    def __init__(self, decision: RateLimitDecision) -> None:
        super().__init__(TOO_MANY_REQUESTS)
        self.decision = decision


class FixedWindowRateLimiter:
    """In-memory fixed-window counter keyed by client address.

    State is process-local and lost on restart; several server processes do
    not share counts.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitDecision:
        now = self.clock()
        with self._lock:
            start, count = self._windows.get(key, (now, 0))
            if now - start >= self.window_seconds:
                start, count = now, 0
            count += 1
            self._windows[key] = (start, count)
            # drop expired windows so the table doesn't grow without bound
            if len(self._windows) > 10_000:
                self._evict(now)
        reset_after = max(0.0, start + self.window_seconds - now)
        allowed = count <= self.max_requests
        return RateLimitDecision(allowed, max(0, self.max_requests - count), reset_after)

    def _evict(self, now: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


def client_address(forwarded_for: str | None, peer: str | None, trusted_hops: int = 1) -> str:
    """Address the request came from as seen by the nearest trusted proxy.

    Each proxy appends the address it received from, so with `trusted_hops`
    proxies in front of the app the client is that many entries from the right.
    Entries further left are supplied by the client and can be forged. With
    `trusted_hops=0` the header is ignored and the socket peer is used.
    """
    if forwarded_for and trusted_hops > 0:
        hops = [h.strip() for h in forwarded_for.split(",") if h.strip()]
        if hops:
            return hops[-trusted_hops] if len(hops) >= trusted_hops else hops[0]
    return peer or "unknown"
