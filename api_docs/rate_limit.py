from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from threading import Lock


@dataclass(slots=True)
class RateDecision:
    allowed: bool
    retry_after_sec: int


class SlidingWindowLimiter:
    """
    Per-key request budget over a trailing one-minute window.

    Keys whose window has emptied are dropped, and idle keys are swept once
    per window, so memory tracks the clients active in the last minute.
    """

    def __init__(self, *, requests_per_minute: int, window_sec: float = 60.0) -> None:
        self.requests_per_minute = requests_per_minute
        self.window_sec = window_sec
        self._hits: dict[str, deque[float]] = {}
        self._next_sweep_at: float | None = None
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._hits)

    def _sweep_idle_keys(self, cutoff: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]

    def allow(self, key: str, *, now: float | None = None) -> RateDecision:
        current = time.monotonic() if now is None else now
        cutoff = current - self.window_sec
        with self._lock:
            if self._next_sweep_at is None or current >= self._next_sweep_at:
                self._sweep_idle_keys(cutoff)
                self._next_sweep_at = current + self.window_sec

            hits = self._hits.get(key)
            if hits is not None:
                while hits and hits[0] <= cutoff:
                    hits.popleft()
                if not hits:
                    del self._hits[key]
                    hits = None

            if hits is not None and len(hits) >= self.requests_per_minute:
                return RateDecision(
                    allowed=False,
                    retry_after_sec=max(1, int(hits[0] + self.window_sec - current)),
                )

            self._hits.setdefault(key, deque()).append(current)
            return RateDecision(allowed=True, retry_after_sec=0)
