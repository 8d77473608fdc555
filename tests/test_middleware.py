"""Tests for retry and rate-limit policies."""

import httpx

from canvas_client.middleware import RateLimiter, RetryPolicy

from conftest import FakeClock


class TestRetryPolicy:
    """Tests for the RetryPolicy class."""

    def test_exponential_backoff(self):
        """Test that delays double and are capped."""
        policy = RetryPolicy(delay=1.0, multiplier=2.0, max_delay=5.0, jitter=False)
        assert policy.get_delay(1) == 1.0
        assert policy.get_delay(2) == 2.0
        assert policy.get_delay(3) == 4.0
        assert policy.get_delay(4) == 5.0

    def test_jitter_adds_at_most_a_quarter(self):
        policy = RetryPolicy(delay=4.0, jitter=True, random_func=lambda: 1.0)
        assert policy.get_delay(1) == 5.0

    def test_retry_after_wins_when_longer(self):
        policy = RetryPolicy(delay=1.0, jitter=False)
        assert policy.get_delay(1, retry_after=30) == 30
        assert policy.get_delay(3, retry_after=0.5) == 4.0

    def test_should_retry_server_errors(self):
        policy = RetryPolicy(max_retries=2)
        assert policy.should_retry_response(httpx.Response(503), 0)
        assert not policy.should_retry_response(httpx.Response(404), 0)

    def test_should_retry_throttled_requests(self):
        policy = RetryPolicy(max_retries=2)
        assert policy.should_retry_response(httpx.Response(429), 0)
        assert policy.should_retry_response(
            httpx.Response(403, text="Rate Limit Exceeded"), 1
        )

    def test_stops_after_max_retries(self):
        policy = RetryPolicy(max_retries=2)
        assert not policy.should_retry_response(httpx.Response(503), 2)

    def test_should_retry_exception(self):
        policy = RetryPolicy(max_retries=1)
        assert policy.should_retry_exception(httpx.ConnectError("refused"), 0)
        assert policy.should_retry_exception(httpx.ReadTimeout("slow"), 0)
        assert not policy.should_retry_exception(httpx.ConnectError("refused"), 1)
        assert not policy.should_retry_exception(httpx.UnsupportedProtocol("ftp"), 0)

    def test_timeouts_can_be_excluded(self):
        policy = RetryPolicy(retry_on_timeout=False)
        assert not policy.should_retry_exception(httpx.ReadTimeout("slow"), 0)

    def test_from_settings(self, settings):
        policy = RetryPolicy.from_settings(settings)
        assert policy.max_retries == settings.max_retries
        assert policy.jitter is False
        assert 502 in policy.retry_on_status


class TestRateLimiter:
    """Tests for the client-side leaky bucket."""

    def make_limiter(self, clock, **kwargs):
        options = dict(
            bucket_size=700,
            leak_rate=10,
            initial_cost=50,
            min_remaining=100,
            max_wait=60,
            clock=clock,
        )
        options.update(kwargs)
        return RateLimiter(**options)

    def test_full_bucket_has_no_delay(self):
        limiter = self.make_limiter(FakeClock())
        assert limiter.remaining == 700
        assert limiter.calculate_delay() == 0

    def test_consume_and_refund(self):
        limiter = self.make_limiter(FakeClock())
        limiter.consume()
        assert limiter.remaining == 650
        limiter.refund()
        assert limiter.remaining == 700

    def test_refund_never_overflows(self):
        limiter = self.make_limiter(FakeClock())
        limiter.refund(500)
        assert limiter.remaining == 700

    def test_delay_when_bucket_runs_low(self):
        """Test the wait needed to get back above the reserve."""
        limiter = self.make_limiter(FakeClock())
        limiter.consume(650)
        # 50 left, need 100 + 50, leaking 10 per second
        assert limiter.calculate_delay() == 10

    def test_bucket_leaks_over_time(self):
        clock = FakeClock()
        limiter = self.make_limiter(clock)
        limiter.consume(600)
        clock.advance(5)
        assert limiter.remaining == 150

    def test_sync_from_remaining_header(self):
        limiter = self.make_limiter(FakeClock())
        limiter.update_from_response(
            httpx.Response(200, headers={"X-Rate-Limit-Remaining": "120.5", "X-Request-Cost": "3"})
        )
        assert limiter.remaining == 120.5

    def test_request_cost_adjusts_precharge(self):
        """Test that a cheaper request gives back part of the pre-charge."""
        limiter = self.make_limiter(FakeClock())
        limiter.consume()
        limiter.update_from_response(httpx.Response(200, headers={"X-Request-Cost": "20"}))
        assert limiter.remaining == 670

    def test_invalid_header_is_ignored(self):
        limiter = self.make_limiter(FakeClock())
        limiter.update_from_response(
            httpx.Response(200, headers={"X-Rate-Limit-Remaining": "lots"})
        )
        assert limiter.remaining == 700
