import pytest

from shipmates.ratelimit import DEFAULT_BURST, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_burst_is_free_then_waits_one_interval():
    clock = FakeClock()
    limiter = RateLimiter(0.5, clock=clock)
    assert [limiter.reserve() for _ in range(DEFAULT_BURST)] == [0.0] * DEFAULT_BURST
    assert limiter.reserve() == pytest.approx(0.5)
    assert limiter.reserve() == pytest.approx(1.0)


def test_tokens_refill_over_time_up_to_burst():
    clock = FakeClock()
    limiter = RateLimiter(0.5, burst=3, clock=clock)
    for _ in range(3):
        limiter.reserve()
    clock.now += 100.0
    assert [limiter.reserve() for _ in range(3)] == [0.0, 0.0, 0.0]
    assert limiter.reserve() > 0


def test_refill_after_one_interval_allows_one_more():
    clock = FakeClock()
    limiter = RateLimiter(2.0, burst=1, clock=clock)
    assert limiter.reserve() == 0.0
    clock.now += 2.0
    assert limiter.reserve() == 0.0
    assert limiter.reserve() == pytest.approx(2.0)


def test_zero_interval_never_waits():
    limiter = RateLimiter(0.0, burst=0)
    assert all(limiter.reserve() == 0.0 for _ in range(50))


def test_invalid_burst_rejected():
    with pytest.raises(ValueError):
        RateLimiter(1.0, burst=0)


def test_wait_sleeps_for_reserved_delay():
    slept = []
    limiter = RateLimiter(0.25, burst=1, clock=FakeClock(), sleep=slept.append)
    limiter.wait()
    limiter.wait()
    assert slept == [pytest.approx(0.25)]


@pytest.mark.asyncio
async def test_wait_async_sleeps_for_reserved_delay():
    slept = []

    async def fake_sleep(delay):
        slept.append(delay)

    limiter = RateLimiter(0.25, burst=2, clock=FakeClock(), async_sleep=fake_sleep)
    for _ in range(3):
        await limiter.wait_async()
    assert slept == [pytest.approx(0.25)]
    # The async waits consumed the burst and one more slot.
    assert limiter.reserve() == pytest.approx(0.5)