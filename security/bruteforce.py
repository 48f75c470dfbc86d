"""
Per-account login throttling.

Each normalized email moves through three states:

    clear (no record) -> accumulating(count, last_failure_at) -> locked

A record is locked once count reaches MAX_LOGIN_ATTEMPTS and stays locked
for LOCKOUT_MINUTES after the last failure. Any record whose last failure is
older than that window is dropped the next time the email is checked, or by
the periodic cleanup. A successful login deletes the record.

The failure that reaches the limit is still answered as invalid credentials;
the lockout message starts with the next attempt.

Every failure also waits an exponentially growing delay before the response
goes out (base 1s, doubling, capped at 10s).

The lock only covers reads and writes of the attempt map, not the delay,
so two concurrent failures for the same email may both observe the old
count. Lockout still triggers on a later attempt; we accept the under-count
rather than serializing logins per account.

Records live in process memory. A restart clears every lockout.
"""
import threading
import time
from typing import Callable, Dict, Iterable, NamedTuple, Optional, Tuple

from flask import current_app

from security.errors import AccountLocked, InvalidCredentials
from security.sanitize import normalize_email


class AttemptRecord(NamedTuple):
    count: int
    last_failure_at: float


class AttemptStore:
    def get(self, key: str) -> Optional[AttemptRecord]:
        raise NotImplementedError

    def set(self, key: str, record: AttemptRecord) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> Iterable[str]:
        raise NotImplementedError


class MemoryAttemptStore(AttemptStore):
    def __init__(self):
        self._records: Dict[str, AttemptRecord] = {}

    def get(self, key: str) -> Optional[AttemptRecord]:
        return self._records.get(key)

    def set(self, key: str, record: AttemptRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._records.keys())

    def __len__(self) -> int:
        return len(self._records)


class LoginThrottleGuard:
    def __init__(
        self,
        max_attempts: int = 5,
        lockout_seconds: float = 15 * 60,
        backoff_base: float = 1.0,
        backoff_max: float = 10.0,
        store: Optional[AttemptStore] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.store = store if store is not None else MemoryAttemptStore()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def backoff_delay(self, count: int) -> float:
        if count <= 0:
            return 0.0
        return min(self.backoff_base * (2 ** (count - 1)), self.backoff_max)

    def _expired(self, record: AttemptRecord, now: float) -> bool:
        return now - record.last_failure_at >= self.lockout_seconds

    def check(self, email: str) -> None:
        """
        Raises AccountLocked while email is locked out.
        """
        key = normalize_email(email)
        now = self._clock()
        with self._lock:
            record = self.store.get(key)
            if record is None:
                return
            if self._expired(record, now):
                # lazy expiry
                self.store.delete(key)
                return
            if record.count < self.max_attempts:
                return

        raise AccountLocked(self.lockout_seconds - (now - record.last_failure_at))

    def register_failure(self, email: str) -> Tuple[int, bool]:
        """
        Returns (fail_count, locked_now) after the backoff delay has elapsed.
        """
        key = normalize_email(email)
        with self._lock:
            record = self.store.get(key)
            count = (record.count if record else 0) + 1
            self.store.set(key, AttemptRecord(count, self._clock()))

        self._sleep(self.backoff_delay(count))
        return count, count >= self.max_attempts

    def reset(self, email: str) -> None:
        with self._lock:
            self.store.delete(normalize_email(email))

    def attempts(self, email: str) -> int:
        with self._lock:
            record = self.store.get(normalize_email(email))
        return record.count if record else 0

    def cleanup(self) -> int:
        """Drops records whose last failure is outside the lockout window."""
        now = self._clock()
        dropped = 0
        with self._lock:
            for key in self.store.keys():
                record = self.store.get(key)
                if record is not None and self._expired(record, now):
                    self.store.delete(key)
                    dropped += 1
        return dropped

    def start_cleanup(self) -> None:
        if self._timer is not None:
            return
        self._schedule()

    def _schedule(self) -> None:
        self._timer = threading.Timer(self.lockout_seconds, self._run_cleanup)
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

    def authenticate(self, email: str, password: str, verify: Callable):
        """
        Runs verify(email, password) behind the lockout check.
        Raises AccountLocked when a lockout is already in force, otherwise
        InvalidCredentials on a bad password.
        """
        self.check(email)
        try:
            account = verify(email, password)
        except InvalidCredentials:
            self.register_failure(email)
            raise
        self.reset(email)
        return account


def init_login_guard(app) -> LoginThrottleGuard:
    guard = LoginThrottleGuard(
        max_attempts=app.config.get("MAX_LOGIN_ATTEMPTS", 5),
        lockout_seconds=app.config.get("LOCKOUT_MINUTES", 15) * 60,
        backoff_base=app.config.get("LOGIN_BACKOFF_BASE_SECONDS", 1),
        backoff_max=app.config.get("LOGIN_BACKOFF_MAX_SECONDS", 10),
    )
    if app.config.get("RATE_LIMIT_CLEANUP_ENABLED", True):
        guard.start_cleanup()
    app.extensions["login_guard"] = guard
    return guard


def get_login_guard() -> LoginThrottleGuard:
    return current_app.extensions["login_guard"]
