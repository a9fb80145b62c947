"""In-memory per-client rate limiter with a ban penalty."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)


@dataclass
class RateWindow:
    request_count: int
    window_start: float
    banned_until: Optional[float] = None


@dataclass(frozen=True)
class RateDecision:
    admitted: bool
    retry_after: float = 0.0


ADMIT = RateDecision(admitted=True)


class RateLimiter:
    """Fixed-window request counter per client IP.

    Each client gets ``limit`` requests per window. The first request over the
    limit bans the client for ``penalty_seconds``; every request during the ban
    is rejected. Once the ban expires the client starts over with a fresh
    window. A ``limit`` of zero disables limiting.
    """

    def __init__(
        self,
        limit: int,
        penalty_seconds: float,
        window_seconds: float = 60,
        *,
        max_tracked_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.penalty = penalty_seconds
        self.window = window_seconds
        self.max_tracked_clients = max_tracked_clients
        self._clock = clock
        self._windows: Dict[str, RateWindow] = {}
        self._lock = Lock()

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def allow(self, client_ip: str) -> bool:
        return self.check(client_ip).admitted

    def check(self, client_ip: str, now: Optional[float] = None) -> RateDecision:
        if not self.enabled:
            return ADMIT
        if now is None:
            now = self._clock()

        with self._lock:
            state = self._windows.get(client_ip)
            if state is None:
                if len(self._windows) >= self.max_tracked_clients:
                    self._evict_idle(now)
                state = RateWindow(request_count=0, window_start=now)
                self._windows[client_ip] = state

            if state.banned_until is not None:
                if now < state.banned_until:
                    retry_after = state.banned_until - now
                    LOGGER.debug(
                        "rejecting rate-limited client",
                        extra={"client_ip": client_ip, "retry_after": round(retry_after, 3)},
                    )
                    return RateDecision(admitted=False, retry_after=retry_after)
                LOGGER.debug("ban expired", extra={"client_ip": client_ip})
                state.banned_until = None
                state.request_count = 0
                state.window_start = now
            elif now - state.window_start >= self.window:
                LOGGER.debug("request count reset", extra={"client_ip": client_ip})
                state.request_count = 0
                state.window_start = now

            state.request_count += 1
            if state.request_count > self.limit:
                state.banned_until = now + self.penalty
                LOGGER.warning(
                    "rate limiting client after %d requests in a window",
                    state.request_count - 1,
                    extra={"client_ip": client_ip, "retry_after": self.penalty},
                )
                return RateDecision(admitted=False, retry_after=float(self.penalty))
            return ADMIT

    def _evict_idle(self, now: float) -> None:
        """Drop clients that are neither banned nor inside a live window."""

        idle = []
        for key, state in self._windows.items():
            if state.banned_until is not None:
                if now >= state.banned_until:
                    idle.append(key)
            elif now - state.window_start >= self.window:
                idle.append(key)
        for key in idle:
            del self._windows[key]
        if idle:
            LOGGER.debug("evicted %d idle rate limit entries", len(idle))
