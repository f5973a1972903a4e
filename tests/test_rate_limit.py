import asyncio

import pytest

from kudos.services.errors import RateLimited
from kudos.services.rate_limit import (
    RATE_LIMITS,
    RateLimitConfig,
    RateLimiter,
    check_rate_limit,
    get_rate_limit_status,
    retry_after_seconds,
)

CONFIG = RateLimitConfig(max_requests=3, window_seconds=60)


def test_configured_categories() -> None:
    assert RATE_LIMITS["nominations"] == RateLimitConfig(10, 3600)
    assert RATE_LIMITS["votes"] == RateLimitConfig(50, 3600)
    assert RATE_LIMITS["reads"] == RateLimitConfig(100, 60)


def test_allows_up_to_max_then_rejects(clock) -> None:
    limiter = RateLimiter(clock=clock)

    results = [limiter.check("votes:alice", CONFIG) for _ in range(3)]
    assert all(result.allowed for result in results)
    assert [result.remaining for result in results] == [2, 1, 0]

    rejected = limiter.check("votes:alice", CONFIG)
    assert rejected.allowed is False
    assert rejected.remaining == 0


def test_rejected_requests_are_not_recorded(clock) -> None:
    limiter = RateLimiter(clock=clock)
    for _ in range(3):
        limiter.check("votes:alice", CONFIG)
    clock.advance(30)
    for _ in range(5):
        assert not limiter.check("votes:alice", CONFIG).allowed

    # Only the three accepted timestamps are in the window, so one full
    # window after the first call the budget is back.
    clock.advance(30)
    assert limiter.check("votes:alice", CONFIG).allowed


def test_window_slides(clock) -> None:
    limiter = RateLimiter(clock=clock)
    first = clock.now
    limiter.check("reads:bob", CONFIG)
    clock.advance(20)
    limiter.check("reads:bob", CONFIG)
    clock.advance(20)
    limiter.check("reads:bob", CONFIG)

    blocked = limiter.check("reads:bob", CONFIG)
    assert not blocked.allowed
    assert blocked.reset_at == first + 60

    clock.advance(21)
    assert limiter.check("reads:bob", CONFIG).allowed
    assert not limiter.check("reads:bob", CONFIG).allowed


def test_reset_at_for_empty_window(clock) -> None:
    limiter = RateLimiter(clock=clock)
    status = limiter.status("reads:nobody", CONFIG)
    assert status.allowed
    assert status.remaining == 3
    assert status.reset_at == clock.now + 60


def test_identifiers_are_independent(clock) -> None:
    limiter = RateLimiter(clock=clock)
    for _ in range(3):
        limiter.check("votes:alice", CONFIG)
    assert not limiter.check("votes:alice", CONFIG).allowed
    assert limiter.check("votes:bob", CONFIG).allowed
    assert limiter.check("reads:alice", CONFIG).allowed


def test_status_does_not_consume(clock) -> None:
    limiter = RateLimiter(clock=clock)
    limiter.check("votes:alice", CONFIG)
    for _ in range(5):
        assert limiter.status("votes:alice", CONFIG).remaining == 2
    assert limiter.check("votes:alice", CONFIG).remaining == 1


def test_sweep_drops_idle_identifiers(clock) -> None:
    limiter = RateLimiter(clock=clock)
    limiter.check("reads:old", CONFIG)
    clock.advance(3601)
    limiter.check("reads:fresh", CONFIG)

    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.status("reads:fresh", CONFIG).remaining == 2


def test_sweeper_task_lifecycle(clock) -> None:
    limiter = RateLimiter(clock=clock, sweep_interval=0.01, max_idle=5)
    limiter.check("reads:alice", CONFIG)
    clock.advance(10)

    async def scenario() -> None:
        limiter.start()
        await asyncio.sleep(0.1)
        await limiter.shutdown()

    asyncio.run(scenario())
    assert len(limiter) == 0


def test_check_rate_limit_raises_with_retry_delay(clock) -> None:
    limiter = RateLimiter(clock=clock)
    for _ in range(10):
        check_rate_limit(limiter, "alice", "nominations")

    clock.advance(100)
    with pytest.raises(RateLimited) as excinfo:
        check_rate_limit(limiter, "alice", "nominations")

    assert excinfo.value.retry_after == 3500
    assert excinfo.value.reset_at == clock.now - 100 + 3600
    assert str(excinfo.value) == "Rate limit exceeded. Try again in 3500 seconds."
    assert get_rate_limit_status(limiter, "alice", "nominations").remaining == 0
    assert get_rate_limit_status(limiter, "bob", "nominations").remaining == 10


def test_retry_after_is_at_least_one_second() -> None:
    assert retry_after_seconds(100.0, now=100.0) == 1
    assert retry_after_seconds(100.0, now=98.5) == 2
