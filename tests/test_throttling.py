"""Tests for the fail-open scoped rate limiter."""

import pytest
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from api.throttling import FailOpenScopedRateThrottle


class StrictView:
    throttle_scope = "strict"


@pytest.fixture
def request_from_client():
    return Request(APIRequestFactory().post("/api/orders/", REMOTE_ADDR="10.0.0.7"))


def make_throttle(rate="2/min"):
    throttle = FailOpenScopedRateThrottle()
    throttle.THROTTLE_RATES = {"strict": rate}
    return throttle


class TestScopedLimits:
    def test_blocks_after_limit(self, request_from_client):
        view = StrictView()

        results = [make_throttle().allow_request(request_from_client, view) for _ in range(3)]

        assert results == [True, True, False]

    def test_limits_are_per_client(self, request_from_client):
        view = StrictView()
        for _ in range(2):
            make_throttle().allow_request(request_from_client, view)

        other = Request(APIRequestFactory().post("/api/orders/", REMOTE_ADDR="10.0.0.8"))

        assert make_throttle().allow_request(other, view) is True

    def test_view_without_scope_is_not_limited(self, request_from_client):
        assert make_throttle().allow_request(request_from_client, object()) is True


class TestFailOpen:
    def test_unreachable_cache_allows_request(self, request_from_client, broken_backend):
        throttle = make_throttle(rate="1/min")
        throttle.cache = broken_backend

        assert throttle.allow_request(request_from_client, StrictView()) is True
        assert throttle.allow_request(request_from_client, StrictView()) is True
