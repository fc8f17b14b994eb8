"""
Rate lookup against a mocked CDN (httpx.MockTransport, no network).
"""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from app.services.rates import RateLookup, resolve_rate

BASE = "https://cdn.example/currency-api"


def _lookup(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return RateLookup(BASE, reference="USD", secondary="ARS", client=client)


def test_dated_rate():
    seen = []

    def handler(request):
        seen.append(str(request.url))
        return httpx.Response(200, json={"date": "2025-03-01", "usd": {"ars": 1065.5}})

    assert _lookup(handler).get_rate(date(2025, 3, 1)) == pytest.approx(1065.5)
    assert len(seen) == 1
    assert "2025-03-01/v1/currencies/usd.json" in seen[0]


def test_falls_back_to_latest_once():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if "latest" in request.url.path:
            return httpx.Response(200, json={"usd": {"ars": 1200}})
        return httpx.Response(404)

    assert _lookup(handler).get_rate("2030-01-01") == pytest.approx(1200)
    assert len(seen) == 2


def test_total_failure_returns_zero():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    assert _lookup(handler).get_rate("2025-03-01") == 0


def test_malformed_payload_returns_zero():
    def handler(request):
        return httpx.Response(200, json={"eur": {"ars": 1}})

    assert _lookup(handler).get_rate("2025-03-01") == 0


class _Fixed:
    def __init__(self):
        self.calls = 0

    def get_rate(self, day):
        self.calls += 1
        return 999.0


def test_resolve_rate_only_looks_up_secondary_without_rate():
    lookup = _Fixed()
    assert resolve_rate(lookup, "ARS", 1000, date(2025, 1, 1)) == 1000
    assert resolve_rate(lookup, "USD", None, date(2025, 1, 1)) is None
    assert lookup.calls == 0
    assert resolve_rate(lookup, "ARS", None, date(2025, 1, 1)) == 999.0
    assert resolve_rate(lookup, None, None, None) == 999.0
    assert lookup.calls == 2
