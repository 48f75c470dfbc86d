"""
Tests for the sliding window rate limiter.
"""
import threading

from conftest import FakeClock
from security.rate_limit import MemoryRateLimitStore, RateLimiter


def _limiter(window=60, max_requests=5):
    clock = FakeClock()
    store = MemoryRateLimitStore()
    return RateLimiter(window, max_requests, store=store, clock=clock), clock, store


def test_allows_up_to_max_then_blocks():
    limiter, clock, _ = _limiter()
    results = [limiter.check("1.2.3.4") for _ in range(6)]

    assert [r.allowed for r in results] == [True] * 5 + [False]
    assert [r.remaining for r in results] == [4, 3, 2, 1, 0, 0]


def test_blocked_reset_time_is_oldest_plus_window():
    limiter, clock, _ = _limiter()
    start = clock.now
    for _ in range(5):
        limiter.check("ip")
        clock.advance(1)

    blocked = limiter.check("ip")
    assert not blocked.allowed
    assert blocked.remaining == 0
    assert blocked.reset_time == start + 60


def test_allows_again_only_after_reset_time():
    limiter, clock, _ = _limiter()
    for _ in range(5):
        limiter.check("ip")
    blocked = limiter.check("ip")

    clock.now = blocked.reset_time - 0.001
    assert not limiter.check("ip").allowed

    clock.now = blocked.reset_time
    assert limiter.check("ip").allowed


def test_window_slides_one_request_at_a_time():
    limiter, clock, _ = _limiter(window=10, max_requests=2)
    assert limiter.check("k").allowed   # t=0
    clock.advance(6)
    assert limiter.check("k").allowed   # t=6
    clock.advance(5)
    # t=11: the t=0 hit expired, the t=6 one has not
    result = limiter.check("k")
    assert result.allowed
    assert result.remaining == 0
    assert not limiter.check("k").allowed


def test_blocked_requests_are_not_recorded():
    limiter, clock, store = _limiter(max_requests=1)
    limiter.check("k")
    for _ in range(3):
        limiter.check("k")
    assert len(store.get("k")) == 1


def test_identifiers_are_independent():
    limiter, _, _ = _limiter(max_requests=1)
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed
    assert limiter.check("b").allowed


def test_reset_time_for_first_request():
    limiter, clock, _ = _limiter()
    assert limiter.check("new").reset_time == clock.now + 60


def test_cleanup_drops_idle_identifiers():
    limiter, clock, store = _limiter()
    limiter.check("old")
    clock.advance(30)
    limiter.check("recent")
    clock.advance(31)

    assert limiter.cleanup() == 1
    assert list(store.identifiers()) == ["recent"]
    assert len(store.get("recent")) == 1


def test_reset_clears_identifier():
    limiter, _, store = _limiter(max_requests=1)
    limiter.check("k")
    limiter.reset("k")
    assert limiter.check("k").allowed


def test_cleanup_timer_start_and_stop():
    limiter, _, _ = _limiter(window=3600)
    limiter.start_cleanup()
    assert limiter._timer is not None
    assert limiter._timer.daemon
    limiter.stop_cleanup()
    assert limiter._timer is None


def test_concurrent_checks_never_exceed_limit():
    limiter = RateLimiter(60, 50)
    allowed = []

    def worker():
        for _ in range(20):
            allowed.append(limiter.check("shared").allowed)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 50
    assert len(allowed) == 160
