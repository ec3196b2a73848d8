"""Tests for FixedWindowRateLimiter."""

import threading

from ephemera.domain import FixedWindowRateLimiter, RateLimitConfig


class TestFixedWindowRateLimiter:
    """Tests for the fixed-window state machine."""

    def test_counts_down_then_rejects(self, limiter, strict_config):
        """Test remaining goes 2, 1, 0 and the fourth call is rejected."""
        results = [limiter.check("ip1", "page.create", strict_config) for _ in range(4)]

        assert [r.success for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]

    def test_first_request_reports_full_window(self, limiter, strict_config):
        """Test a fresh window reports the whole window as reset time."""
        result = limiter.check("ip1", "page.create", strict_config)

        assert result.reset_in_seconds == 60

    def test_reset_in_seconds_rounds_up(self, limiter, strict_config, fake_clock):
        """Test partial seconds round up."""
        limiter.check("ip1", "a", strict_config)
        fake_clock.advance(10.2)

        assert limiter.check("ip1", "a", strict_config).reset_in_seconds == 50

    def test_auth_scenario(self, limiter, fake_clock):
        """Test five sign-in attempts pass and the sixth is throttled."""
        config = RateLimitConfig(limit=5, window_seconds=60)

        for _ in range(5):
            assert limiter.check("ip1", "auth.signin", config).success

        fake_clock.advance(1.5)
        sixth = limiter.check("ip1", "auth.signin", config)

        assert sixth.success is False
        assert sixth.remaining == 0
        assert 0 < sixth.reset_in_seconds <= 60

    def test_rejection_does_not_consume(self, limiter, strict_config):
        """Test rejected requests leave the count unchanged."""
        for _ in range(6):
            limiter.check("ip1", "a", strict_config)

        assert limiter.get_entry("ip1", "a").count == 3

    def test_window_expiry_starts_fresh(self, limiter, strict_config, fake_clock):
        """Test an expired window is replaced regardless of its count."""
        for _ in range(4):
            limiter.check("ip1", "a", strict_config)

        fake_clock.advance(60)
        result = limiter.check("ip1", "a", strict_config)

        assert result.success is True
        assert result.remaining == 2
        assert limiter.get_entry("ip1", "a").count == 1

    def test_still_limited_just_before_expiry(self, limiter, strict_config, fake_clock):
        """Test the window holds until its reset time."""
        for _ in range(3):
            limiter.check("ip1", "a", strict_config)

        fake_clock.advance(59.9)
        result = limiter.check("ip1", "a", strict_config)

        assert result.success is False
        assert result.reset_in_seconds == 1

    def test_keys_are_independent(self, limiter, strict_config):
        """Test different actions and identifiers use separate counters."""
        for _ in range(3):
            limiter.check("ip1", "a", strict_config)

        assert limiter.check("ip1", "a", strict_config).success is False
        assert limiter.check("ip1", "b", strict_config).success is True
        assert limiter.check("ip2", "a", strict_config).success is True

    def test_key_format(self):
        """Test keys are action:identifier."""
        assert FixedWindowRateLimiter.make_key("ip1", "auth.signin") == "auth.signin:ip1"

    def test_reset_single_key(self, limiter, strict_config):
        """Test reset forgets one key only."""
        for _ in range(3):
            limiter.check("ip1", "a", strict_config)
            limiter.check("ip2", "a", strict_config)

        limiter.reset("ip1", "a")

        assert limiter.check("ip1", "a", strict_config).success is True
        assert limiter.check("ip2", "a", strict_config).success is False

    def test_clear(self, limiter, strict_config):
        """Test clear empties the table."""
        limiter.check("ip1", "a", strict_config)
        limiter.check("ip2", "b", strict_config)

        limiter.clear()

        assert len(limiter) == 0

    def test_sweep_removes_only_expired(self, limiter, fake_clock):
        """Test sweep purges expired entries and keeps live ones."""
        limiter.check("ip1", "short", RateLimitConfig(limit=5, window_seconds=10))
        limiter.check("ip1", "long", RateLimitConfig(limit=5, window_seconds=600))

        fake_clock.advance(30)
        removed = limiter.sweep()

        assert removed == 1
        assert limiter.get_entry("ip1", "short") is None
        assert limiter.get_entry("ip1", "long") is not None

    def test_instances_are_isolated(self, fake_clock, strict_config):
        """Test two limiters never share state."""
        first = FixedWindowRateLimiter(fake_clock)
        second = FixedWindowRateLimiter(fake_clock)

        for _ in range(3):
            first.check("ip1", "a", strict_config)

        assert second.check("ip1", "a", strict_config).success is True

    def test_default_clock(self, strict_config):
        """Test a limiter works without an injected clock."""
        limiter = FixedWindowRateLimiter()

        assert limiter.check("ip1", "a", strict_config).success is True


class TestRateLimiterConcurrency:
    """Tests for concurrent check-and-increment."""

    def test_no_lost_updates(self, fake_clock):
        """Test concurrent checks never admit more than the limit."""
        limiter = FixedWindowRateLimiter(fake_clock)
        config = RateLimitConfig(limit=50, window_seconds=60)
        admitted = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(25):
                if limiter.check("ip1", "a", config).success:
                    with lock:
                        admitted.append(1)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(admitted) == 50
        assert limiter.get_entry("ip1", "a").count == 50
