"""Unit tests for the sliding-window rate limiter."""

from cyclonewatch.services.ratelimit import (
    DEFAULT_MAX_REQUESTS,
    DEFAULT_WINDOW_SECONDS,
    RateLimiter,
)


class TestRateLimiterInit:
    """Tests for defaults."""

    def test_defaults(self) -> None:
        limiter = RateLimiter()
        assert limiter.max_requests == DEFAULT_MAX_REQUESTS == 12
        assert limiter.window_seconds == DEFAULT_WINDOW_SECONDS == 3600


class TestRateLimiterWindow:
    """Tests for admitting and refusing requests."""

    def test_allows_until_limit(self, clock) -> None:
        limiter = RateLimiter(clock=clock)
        for _ in range(11):
            limiter.record_request("x")
        assert limiter.can_make_request("x")
        limiter.record_request("x")
        assert not limiter.can_make_request("x")

    def test_window_slides(self, clock) -> None:
        limiter = RateLimiter(clock=clock)
        for _ in range(12):
            limiter.record_request("x")
        assert not limiter.can_make_request("x")
        clock.advance(3600 + 1)
        assert limiter.can_make_request("x")

    def test_request_exactly_window_old_is_dropped(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.record_request("x")
        clock.advance(60)
        assert limiter.can_make_request("x")

    def test_keys_are_independent(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, clock=clock)
        limiter.record_request("a")
        assert not limiter.can_make_request("a")
        assert limiter.can_make_request("b")

    def test_remaining(self, clock) -> None:
        limiter = RateLimiter(max_requests=3, clock=clock)
        assert limiter.get_remaining_requests("x") == 3
        limiter.record_request("x")
        assert limiter.get_remaining_requests("x") == 2

    def test_remaining_never_negative(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, clock=clock)
        limiter.record_request("x")
        limiter.record_request("x")
        assert limiter.get_remaining_requests("x") == 0


class TestTimeUntilNextRequest:
    """Tests for wait time reporting."""

    def test_zero_when_allowed(self, clock) -> None:
        assert RateLimiter(clock=clock).get_time_until_next_request("x") == 0

    def test_waits_for_oldest(self, clock) -> None:
        limiter = RateLimiter(max_requests=2, window_seconds=100, clock=clock)
        limiter.record_request("x")
        clock.advance(30)
        limiter.record_request("x")
        clock.advance(10)
        assert limiter.get_time_until_next_request("x") == 60

    def test_zero_after_window(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, window_seconds=100, clock=clock)
        limiter.record_request("x")
        clock.advance(150)
        assert limiter.get_time_until_next_request("x") == 0


class TestReset:
    """Tests for clearing history."""

    def test_reset_one(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, clock=clock)
        limiter.record_request("a")
        limiter.record_request("b")
        limiter.reset("a")
        assert limiter.can_make_request("a")
        assert not limiter.can_make_request("b")

    def test_reset_all(self, clock) -> None:
        limiter = RateLimiter(max_requests=1, clock=clock)
        limiter.record_request("a")
        limiter.record_request("b")
        limiter.reset()
        assert limiter.endpoints() == []
