"""
Unit tests for currency normalization (pure functions, no DB).
Rates are ARS per USD; USD is the reference currency.
"""

import pytest

from app.models import Currency
from app.services.currency import (
    ExpenseSize,
    convert,
    expense_size,
    from_reference,
    is_convertible,
    to_reference,
)


def test_secondary_divides_by_rate():
    assert to_reference(1000, "ARS", 1000) == pytest.approx(1.0)


def test_reference_amount_unchanged_whatever_the_rate():
    assert to_reference(5, "USD", 1000) == 5
    assert to_reference(5, Currency.USD, 0) == 5


@pytest.mark.parametrize("rate", [0, None, -3])
def test_unknown_rate_gives_zero_and_flag(rate):
    assert to_reference(1000, "ARS", rate) == 0
    converted = convert(1000, "ARS", rate)
    assert converted.amount == 0
    assert converted.convertible is False


def test_convertible_flag():
    assert is_convertible("USD", 0)
    assert is_convertible("ARS", 950.5)
    assert not is_convertible("ARS", 0)


def test_explicit_reference_overrides_settings():
    # with ARS as reference, ARS amounts pass through untouched
    assert to_reference(1500, "ARS", 0, reference="ARS") == 1500


def test_from_reference_multiplies():
    assert from_reference(2, 1000) == pytest.approx(2000)
    assert from_reference(2, 0) == 0


def test_expense_size_threshold():
    assert expense_size(15, "USD", 0) == ExpenseSize.MAJOR
    assert expense_size(14.99, "USD", 0) == ExpenseSize.MICRO
    assert expense_size(20000, "ARS", 1000) == ExpenseSize.MAJOR
    # unknown rate: can't tell, treated as micro
    assert expense_size(20000, "ARS", 0) == ExpenseSize.MICRO
