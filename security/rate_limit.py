"""
Sliding window rate limiting keyed by an identifier (client IP, email, ...).

State is process-local: a restart clears every window, and several app
processes do not share counts. A shared backend only needs to implement
RateLimitStore.
"""
import threading
import time
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from flask import current_app


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    reset_time: float  # epoch seconds


class RateLimitStore:
    """Timestamp lists per identifier. Callers serialize access."""

    def get(self, identifier: str) -> List[float]:
        raise NotImplementedError

    def set(self, identifier: str, timestamps: List[float]) -> None:
        raise NotImplementedError

    def delete(self, identifier: str) -> None:
        raise NotImplementedError

    def identifiers(self) -> Iterable[str]:
        raise NotImplementedError


class MemoryRateLimitStore(RateLimitStore):
    def __init__(self):
        self._windows: Dict[str, List[float]] = {}

    def get(self, identifier: str) -> List[float]:
        return list(self._windows.get(identifier, ()))

    def set(self, identifier: str, timestamps: List[float]) -> None:
        self._windows[identifier] = timestamps

    def delete(self, identifier: str) -> None:
        self._windows.pop(identifier, None)

    def identifiers(self) -> Iterable[str]:
        return list(self._windows.keys())

    def __len__(self) -> int:
        return len(self._windows)


class RateLimiter:
    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.store = store if store is not None else MemoryRateLimitStore()
        self._clock = clock
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def now(self) -> float:
        return self._clock()

    def _recent(self, identifier: str, now: float) -> List[float]:
        window_start = now - self.window_seconds
        return [t for t in self.store.get(identifier) if t > window_start]

    def check(self, identifier: str) -> RateLimitResult:
        """
        Counts one request for identifier unless it is over the limit.
        """
        now = self._clock()
        with self._lock:
            timestamps = self._recent(identifier, now)
            reset_time = (timestamps[0] if timestamps else now) + self.window_seconds

            if len(timestamps) >= self.max_requests:
                self.store.set(identifier, timestamps)
                return RateLimitResult(False, 0, reset_time)

            timestamps.append(now)
            self.store.set(identifier, timestamps)
            return RateLimitResult(True, self.max_requests - len(timestamps), reset_time)

    def reset(self, identifier: str) -> None:
        with self._lock:
            self.store.delete(identifier)

    def cleanup(self) -> int:
        """Drops identifiers with nothing left in the window. Returns how many."""
        now = self._clock()
        dropped = 0
        with self._lock:
            for identifier in self.store.identifiers():
                timestamps = self._recent(identifier, now)
                if timestamps:
                    self.store.set(identifier, timestamps)
                else:
                    self.store.delete(identifier)
                    dropped += 1
        return dropped

    def start_cleanup(self) -> None:
        if self._timer is not None:
            return
        self._schedule()

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.window_seconds, self._run_cleanup)
        self._timer.daemon = True
        self._timer.start()

    def _run_cleanup(self) -> None:
        self.cleanup()
        if self._timer is not None:
            self._schedule()

    def stop_cleanup(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()


def init_rate_limiters(app) -> Dict[str, RateLimiter]:
    limiters = {
        "comments": RateLimiter(
            app.config.get("COMMENT_RATE_WINDOW_SECONDS", 60),
            app.config.get("COMMENT_RATE_MAX_REQUESTS", 5),
        ),
        "login": RateLimiter(
            app.config.get("LOGIN_RATE_WINDOW_SECONDS", 900),
            app.config.get("LOGIN_RATE_MAX_REQUESTS", 10),
        ),
    }
    if app.config.get("RATE_LIMIT_CLEANUP_ENABLED", True):
        for limiter in limiters.values():
            limiter.start_cleanup()

    app.extensions["rate_limiters"] = limiters
    return limiters


def get_rate_limiter(name: str) -> RateLimiter:
    return current_app.extensions["rate_limiters"][name]
