# app/services/rates.py
"""
Historical exchange-rate lookup (fawazahmed0/currency-api via jsDelivr).

- get_rate(date) -> ARS per USD for that date
- falls back once to "@latest" when the dated file is missing
- returns 0 on any failure; callers store 0 as "rate unknown"
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Union

import httpx

from app.config import get_settings

logger = logging.getLogger("ff.rates")


class RateLookup:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        reference: Optional[str] = None,
        secondary: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.rate_api_url).rstrip("/")
        self.reference = (reference or settings.reference_currency).lower()
        self.secondary = (secondary or settings.secondary_currency).lower()
        self.timeout = timeout if timeout is not None else settings.rate_timeout_seconds
        self._client = client

    def _url(self, tag: str) -> str:
        return f"{self.base_url}@{tag}/v1/currencies/{self.reference}.json"

    def _fetch(self, tag: str) -> float:
        client = self._client or httpx.Client(timeout=self.timeout)
        try:
            response = client.get(self._url(tag))
            response.raise_for_status()
            payload = response.json()
        finally:
            if self._client is None:
                client.close()
        return float(payload[self.reference][self.secondary] or 0)

    def get_rate(self, day: Union[date, str]) -> float:
        tag = day.isoformat() if isinstance(day, date) else str(day)
        try:
            return self._fetch(tag)
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as ex:
            logger.warning(
                "Rate lookup for %s failed (%s), trying latest", tag, ex
            )

        try:
            return self._fetch("latest")
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as ex:
            logger.error("Rate fallback failed: %s", ex)
        return 0.0


def get_rate_lookup() -> RateLookup:
    """FastAPI dependency; tests override it with a stub."""
    return RateLookup()


def resolve_rate(
    lookup: RateLookup,
    currency: Optional[str],
    exchange_rate: Optional[float],
    day: Union[date, str, None],
) -> Optional[float]:
    """
    Rate to store with a new entry: the caller's if given; else, for
    secondary-currency amounts, the historical rate of `day` (0 when unavailable).
    Reference-currency amounts without a rate stay None (stored as 0).
    """
    if exchange_rate is not None:
        return exchange_rate
    code = (currency or get_settings().secondary_currency).strip().upper()
    if code == get_settings().reference_currency.upper():
        return None
    return lookup.get_rate(day or date.today())
