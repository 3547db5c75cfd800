# test_limiter.py
# Unit tests for the fixed-window rate limiter and client IP resolution

# @see: isim_api/limiter.py - Implementation under test
# @note: The window test sleeps for just over one second

import time

import pytest
from starlette.requests import Request

from isim_api.limiter import RateLimiter, client_ip


@pytest.fixture
def limiter():
    return RateLimiter("10/minute")


def test_eleventh_request_in_window_rejected(limiter):
    results = [limiter.allow("203.0.113.7") for _ in range(11)]
    assert results[:10] == [True] * 10
    assert results[10] is False


def test_first_request_of_next_window_accepted(limiter):
    for _ in range(10):
        assert limiter.allow("203.0.113.7", max_requests=10, window_seconds=1)
    assert limiter.allow("203.0.113.7", max_requests=10, window_seconds=1) is False

    time.sleep(1.1)
    assert limiter.allow("203.0.113.7", max_requests=10, window_seconds=1) is True


def test_keys_are_counted_separately(limiter):
    for _ in range(10):
        limiter.allow("198.51.100.1")
    assert limiter.allow("198.51.100.1") is False
    assert limiter.allow("198.51.100.2") is True


def test_missing_key_shares_unknown_bucket(limiter):
    for _ in range(10):
        limiter.allow(None)
    assert limiter.allow("") is False
    assert limiter.allow("unknown") is False


def test_info_for_unseen_key_reports_full_quota(limiter):
    info = limiter.info("never-seen")
    assert info.limit == 10
    assert info.remaining == 10
    assert info.reset_in == 60


def test_info_counts_down_without_consuming(limiter):
    for _ in range(3):
        limiter.allow("k")
    info = limiter.info("k")
    assert info.remaining == 7
    assert 0 < info.reset_in <= 60
    assert limiter.info("k").remaining == 7


def test_reset_clears_all_counters(limiter):
    for _ in range(11):
        limiter.allow("k")
    limiter.reset()
    assert limiter.allow("k") is True


def test_limit_string_is_parsed(limiter):
    assert limiter.max_requests == 10
    assert limiter.window_seconds == 60


def _request(headers=None, client=("10.0.0.9", 50000)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientIp:
    def test_first_forwarded_for_entry_wins(self):
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "X-Real-IP": "198.51.100.3"})
        assert client_ip(request) == "203.0.113.7"

    def test_real_ip_used_without_forwarded_for(self):
        assert client_ip(_request({"X-Real-IP": "198.51.100.3"})) == "198.51.100.3"

    def test_socket_peer_used_without_proxy_headers(self):
        assert client_ip(_request()) == "10.0.0.9"

    def test_unknown_without_any_source(self):
        assert client_ip(_request(client=None)) == "unknown"
