import threading
import unittest

from emotionscore.rate_limiter import RateLimiter
from emotionscore.runtime_settings import build_runtime_settings


class FakeClock:
    def __init__(self, start=500.0):
        self.now = start

    def __call__(self):
        return self.now


class TestRateLimiter(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()

    def test_allows_up_to_max_then_limits(self):
        limiter = RateLimiter(window_ms=60000, max_requests=20, clock=self.clock)
        results = [limiter.is_rate_limited("user-1") for _ in range(21)]
        self.assertEqual(results[:20], [False] * 20)
        self.assertTrue(results[20])
        self.assertEqual(limiter.request_count("user-1"), 20)

    def test_limited_calls_are_not_recorded(self):
        limiter = RateLimiter(window_ms=1000, max_requests=1, clock=self.clock)
        self.assertFalse(limiter.is_rate_limited("u"))
        for _ in range(5):
            self.assertTrue(limiter.is_rate_limited("u"))
        self.clock.now += 1.0
        self.assertFalse(limiter.is_rate_limited("u"))

    def test_window_slides(self):
        limiter = RateLimiter(window_ms=10000, max_requests=2, clock=self.clock)
        self.assertFalse(limiter.is_rate_limited("u"))
        self.clock.now += 6
        self.assertFalse(limiter.is_rate_limited("u"))
        self.assertTrue(limiter.is_rate_limited("u"))
        self.clock.now += 4.5
        self.assertFalse(limiter.is_rate_limited("u"))
        self.assertEqual(limiter.request_count("u"), 2)

    def test_identities_are_independent_and_stringified(self):
        limiter = RateLimiter(window_ms=60000, max_requests=1, clock=self.clock)
        self.assertFalse(limiter.is_rate_limited(42))
        self.assertTrue(limiter.is_rate_limited("42"))
        self.assertFalse(limiter.is_rate_limited("other"))

    def test_reset_clears_identity(self):
        limiter = RateLimiter(window_ms=60000, max_requests=1, clock=self.clock)
        limiter.is_rate_limited("u")
        limiter.reset("u")
        self.assertEqual(limiter.request_count("u"), 0)
        self.assertFalse(limiter.is_rate_limited("u"))

    def test_idle_identities_are_forgotten(self):
        limiter = RateLimiter(window_ms=1000, max_requests=5, clock=self.clock)
        for index in range(50):
            limiter.is_rate_limited(f"session-{index}")
        self.assertEqual(limiter.tracked_identities, 50)

        self.clock.now += 1.0
        self.assertFalse(limiter.is_rate_limited("fresh"))
        self.assertEqual(limiter.tracked_identities, 1)

    def test_request_count_drops_expired_identity(self):
        limiter = RateLimiter(window_ms=1000, max_requests=5, clock=self.clock)
        limiter.is_rate_limited("u")
        self.clock.now += 2.0
        self.assertEqual(limiter.request_count("u"), 0)
        self.assertEqual(limiter.tracked_identities, 0)

    def test_from_settings(self):
        settings = build_runtime_settings(
            config_data={"runtime": {"rate_limit": {"window_ms": 1000, "max_requests": 3}}},
            env_data={},
        )
        limiter = RateLimiter.from_settings(settings, clock=self.clock)
        self.assertEqual([limiter.is_rate_limited("u") for _ in range(4)], [False, False, False, True])

    def test_concurrent_callers_never_exceed_limit(self):
        limiter = RateLimiter(window_ms=60000, max_requests=20, clock=self.clock)
        allowed = []
        lock = threading.Lock()

        def caller():
            for _ in range(10):
                if not limiter.is_rate_limited("shared"):
                    with lock:
                        allowed.append(1)

        threads = [threading.Thread(target=caller) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(len(allowed), 20)


if __name__ == "__main__":
    unittest.main()
