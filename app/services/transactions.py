# app/services/transactions.py
"""
Ledger helpers for Transactions.

Why:
- Keep router code thin.
- One place that turns loose input (tags, currency codes, missing defaults)
  into a valid ledger row: positive amount, current type tag, known currency.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlmodel import Session, select

from app.errors import NotFound, ValidationError
from app.models import Currency, Transaction, TransactionType
from app.period_ym import period_bounds

DEFAULT_CATEGORY = "Otros"

# fields a fixed expense edit may change
FIXED_EXPENSE_FIELDS = ("description", "amount", "currency", "category", "exchange_rate")


def coerce_type(value: Union[TransactionType, str]) -> TransactionType:
    if isinstance(value, TransactionType):
        return value
    try:
        return TransactionType.from_tag(value)
    except ValueError:
        raise ValidationError(f"Unknown transaction type: {value!r}") from None


def coerce_currency(value: Union[Currency, str, None], default: Currency) -> Currency:
    if value is None or value == "":
        return default
    if isinstance(value, Currency):
        return value
    try:
        return Currency(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Unsupported currency: {value!r}") from None


def check_amount(amount: Any) -> float:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError("amount must be a number") from None
    if value <= 0:
        raise ValidationError("amount must be greater than 0")
    return value


def build_transaction(
    *,
    type: Union[TransactionType, str],
    amount: float,
    date: date,
    currency: Union[Currency, str, None] = None,
    exchange_rate: Optional[float] = None,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> Transaction:
    """Validated, unsaved row. Callers that write pairs add it to their own unit."""
    rate = float(exchange_rate or 0)
    if rate < 0:
        raise ValidationError("exchange_rate must be >= 0")
    return Transaction(
        type=coerce_type(type),
        amount=check_amount(amount),
        currency=coerce_currency(currency, Currency.ARS),
        exchange_rate=rate,
        category=(category or "").strip() or DEFAULT_CATEGORY,
        description=description,
        date=date,
    )


def create_transaction(session: Session, **fields: Any) -> Transaction:
    """
    Create a Transaction row and commit it.

    Plain words:
    - Legacy 'MAJOR_EXPENSE'/'MICRO_EXPENSE' tags are stored as EXPENSE.
    - Missing currency/rate/category fall back to ARS / 0 / 'Otros'.
    - We commit & refresh so the caller gets a persisted object with an id.
    """
    txn = build_transaction(**fields)
    session.add(txn)
    session.commit()
    session.refresh(txn)
    return txn


def list_transactions(
    session: Session,
    year: int,
    month: Union[str, int, None] = None,
    category: Optional[str] = None,
    type: Union[TransactionType, str, None] = None,
) -> List[Transaction]:
    """Rows of a year (optionally one month / category / type), newest first."""
    try:
        start, end = period_bounds(year, month)
    except ValueError as ex:
        raise ValidationError(str(ex)) from ex

    stmt = select(Transaction).where(Transaction.date >= start, Transaction.date < end)
    if category and category != "all":
        stmt = stmt.where(Transaction.category == category)
    if type:
        stmt = stmt.where(Transaction.type == coerce_type(type))
    stmt = stmt.order_by(Transaction.date.desc(), Transaction.id.desc())
    return list(session.exec(stmt).all())


def get_transaction(session: Session, txn_id: int) -> Transaction:
    txn = session.get(Transaction, txn_id)
    if txn is None:
        raise NotFound("Transaction not found")
    return txn


def delete_transaction(session: Session, txn_id: int) -> None:
    """Delete one ledger row. Installment payment records are left untouched."""
    txn = get_transaction(session, txn_id)
    session.delete(txn)
    session.commit()


def update_fixed_expense(
    session: Session, txn_id: int, changes: Dict[str, Any]
) -> Transaction:
    """
    Edit a FIXED_EXPENSE row (the only ledger rows that may change after creation).
    Unknown keys and None values are ignored.
    """
    updates = {
        k: v for k, v in changes.items() if k in FIXED_EXPENSE_FIELDS and v is not None
    }
    if not updates:
        raise ValidationError("No fields to update")

    txn = session.get(Transaction, txn_id)
    if txn is None or txn.type != TransactionType.FIXED_EXPENSE:
        raise NotFound("Fixed expense not found")

    if "amount" in updates:
        updates["amount"] = check_amount(updates["amount"])
    if "currency" in updates:
        updates["currency"] = coerce_currency(updates["currency"], txn.currency)
    if "exchange_rate" in updates:
        updates["exchange_rate"] = float(updates["exchange_rate"])
        if updates["exchange_rate"] < 0:
            raise ValidationError("exchange_rate must be >= 0")

    for key, value in updates.items():
        setattr(txn, key, value)
    session.add(txn)
    session.commit()
    session.refresh(txn)
    return txn
