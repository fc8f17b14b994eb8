# app/services/currency.py
"""
Currency normalization (pure functions, no I/O).

Rates are captured at write time as "secondary units per 1 reference unit"
(e.g. 1000 ARS per USD), so:
- secondary -> reference divides by the rate
- reference -> secondary multiplies by it

A rate of 0 means "unknown": the amount can't be converted and contributes 0.
Aggregations use `convert()` and skip rows whose `convertible` is False.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Optional, Union

from app.config import get_settings
from app.models import Currency

# legacy major/micro split, in reference units
MAJOR_EXPENSE_THRESHOLD = 15

CurrencyLike = Union[Currency, str]


class Converted(NamedTuple):
    amount: float
    convertible: bool


class ExpenseSize(str, Enum):
    MAJOR = "MAJOR"
    MICRO = "MICRO"


def _code(currency: CurrencyLike) -> str:
    if isinstance(currency, Currency):
        return currency.value
    return (currency or "").strip().upper()


def reference_code(reference: Optional[CurrencyLike] = None) -> str:
    return _code(reference) if reference else _code(get_settings().reference_currency)


def is_reference(currency: CurrencyLike, reference: Optional[CurrencyLike] = None) -> bool:
    return _code(currency) == reference_code(reference)


def is_convertible(
    currency: CurrencyLike, rate: Optional[float], reference: Optional[CurrencyLike] = None
) -> bool:
    return is_reference(currency, reference) or (rate or 0) > 0


def convert(
    amount: float,
    currency: CurrencyLike,
    rate: Optional[float],
    reference: Optional[CurrencyLike] = None,
) -> Converted:
    """Normalize one amount to the reference currency, keeping the flag."""
    if is_reference(currency, reference):
        return Converted(float(amount), True)
    if rate is not None and rate > 0:
        return Converted(float(amount) / rate, True)
    return Converted(0.0, False)


def to_reference(
    amount: float,
    currency: CurrencyLike,
    rate: Optional[float],
    reference: Optional[CurrencyLike] = None,
) -> float:
    """
    Examples (reference USD):
      to_reference(1000, "ARS", 1000) -> 1.0
      to_reference(5, "USD", 1000)    -> 5
      to_reference(1000, "ARS", 0)    -> 0
    """
    return convert(amount, currency, rate, reference).amount


def from_reference(amount: float, rate: Optional[float]) -> float:
    """Reference -> secondary. Unknown rate gives 0."""
    if rate is None or rate <= 0:
        return 0.0
    return float(amount) * rate


def expense_size(
    amount: float,
    currency: CurrencyLike,
    rate: Optional[float],
    reference: Optional[CurrencyLike] = None,
) -> ExpenseSize:
    """
    Derived major/micro label for an expense (never stored).
    Unconvertible amounts count as 0 and land in MICRO.
    """
    value = to_reference(amount, currency, rate, reference)
    if value >= MAJOR_EXPENSE_THRESHOLD:
        return ExpenseSize.MAJOR
    return ExpenseSize.MICRO
