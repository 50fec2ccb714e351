"""Tests for the rate limiter utility."""

from __future__ import annotations

import pytest

from tagmatch.utils.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced clock; sleeping advances it too."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(clock=clock, sleep=clock.sleep)


class TestRateLimiter:
    def test_first_call_does_not_sleep(self, limiter, clock):
        assert limiter.wait("test_service", 1.0) == 0.0
        assert clock.sleeps == []

    def test_second_call_sleeps(self, limiter, clock):
        limiter.wait("test_service", 1.0)
        clock.now += 0.25
        slept = limiter.wait("test_service", 1.0)
        assert slept == pytest.approx(0.75)
        assert clock.sleeps == [pytest.approx(0.75)]

    def test_no_sleep_after_interval_passed(self, limiter, clock):
        limiter.wait("test_service", 1.0)
        clock.now += 2.0
        assert limiter.wait("test_service", 1.0) == 0.0

    def test_different_services_independent(self, limiter, clock):
        limiter.wait("service_a", 1.0)
        # Service B should not have to wait for service A
        assert limiter.wait("service_b", 1.0) == 0.0
        assert clock.sleeps == []

    def test_reset_one_service(self, limiter):
        limiter.wait("service_a", 1.0)
        limiter.wait("service_b", 1.0)
        limiter.reset("service_a")
        assert limiter.wait("service_a", 1.0) == 0.0
        assert limiter.wait("service_b", 1.0) > 0.0

    def test_reset_all(self, limiter):
        limiter.wait("service_a", 1.0)
        limiter.wait("service_b", 1.0)
        limiter.reset()
        assert limiter.wait("service_a", 1.0) == 0.0
        assert limiter.wait("service_b", 1.0) == 0.0
