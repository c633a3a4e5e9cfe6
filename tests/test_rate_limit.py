from backend.rate_limit import FixedWindowRateLimiter, client_address


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_max_then_blocks():
    limiter = FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
    decisions = [limiter.hit("1.2.3.4") for _ in range(4)]
    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=clock)
    assert limiter.hit("a").allowed
    clock.now += 30
    blocked = limiter.hit("a")
    assert not blocked.allowed
    assert blocked.reset_after == 30
    clock.now += 30
    assert limiter.hit("a").allowed


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a").allowed
    assert not limiter.hit("a").allowed
    assert limiter.hit("b").allowed


def test_reset_clears_counts():
    limiter = FixedWindowRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.hit("a")
    limiter.reset()
    assert limiter.hit("a").allowed


def test_client_address_takes_rightmost_trusted_hop():
    assert client_address("198.51.100.1, 203.0.113.7", "10.0.0.1") == "203.0.113.7"
    assert client_address("198.51.100.1, 203.0.113.7, 10.0.0.5", "10.0.0.1", trusted_hops=2) == "203.0.113.7"
    assert client_address("203.0.113.7", "10.0.0.1", trusted_hops=3) == "203.0.113.7"
    assert client_address("203.0.113.7", "10.0.0.1", trusted_hops=0) == "10.0.0.1"
    assert client_address(None, "127.0.0.1") == "127.0.0.1"
    assert client_address(" ", None) == "unknown"
