# app/services/summary.py
"""
Monthly / yearly rollups of the ledger.

Two flavours:
- raw: plain SUM(amount) per group, currencies mixed (legacy dashboard)
- normalized: every row converted to the reference currency first;
  rows with an unknown rate are left out (a smaller total, not an error)

Month filter: None / "all" for the whole year, else a month 1..12.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Union

from sqlalchemy import func
from sqlmodel import Session, select

from app.errors import ValidationError
from app.models import Installment, Transaction, TransactionType
from app.period_ym import parse_month_filter, period_bounds
from app.services.currency import ExpenseSize, convert, expense_size

MonthFilter = Union[str, int, None]


def _period(year: int, month: MonthFilter):
    try:
        return period_bounds(year, month)
    except ValueError as ex:
        raise ValidationError(str(ex)) from ex


def _in_period(stmt, year: int, month: MonthFilter):
    start, end = _period(year, month)
    return stmt.where(Transaction.date >= start, Transaction.date < end)


def _rows(session: Session, year: int, month: MonthFilter, exclude_income: bool = False):
    stmt = _in_period(select(Transaction), year, month)
    if exclude_income:
        stmt = stmt.where(Transaction.type != TransactionType.INCOME)
    return session.exec(stmt).all()


# ---------- By type ----------


def summary_by_type(session: Session, year: int, month: MonthFilter = None) -> Dict[str, float]:
    """Raw SUM(amount) per type, mixed currencies."""
    stmt = _in_period(
        select(Transaction.type, func.sum(Transaction.amount)), year, month
    ).group_by(Transaction.type)
    return {t.value: float(total or 0) for t, total in session.exec(stmt).all()}


def summary_by_type_normalized(
    session: Session, year: int, month: MonthFilter = None
) -> Dict[str, float]:
    """Reference-currency totals per type. INSTALLMENT = payments actually made."""
    totals: Dict[str, float] = defaultdict(float)
    for row in _rows(session, year, month):
        value, ok = convert(row.amount, row.currency, row.exchange_rate)
        if ok:
            totals[row.type.value] += value
    return dict(totals)


# ---------- By category ----------


def summary_by_category(
    session: Session, year: int, month: MonthFilter = None
) -> List[Dict[str, object]]:
    """Raw spending per category (INCOME excluded), biggest first."""
    total = func.sum(Transaction.amount).label("total")
    stmt = (
        _in_period(select(Transaction.category, total), year, month)
        .where(Transaction.type != TransactionType.INCOME)
        .group_by(Transaction.category)
        .order_by(total.desc())
    )
    return [{"category": c, "total": float(t or 0)} for c, t in session.exec(stmt).all()]


def summary_by_category_normalized(
    session: Session, year: int, month: MonthFilter = None
) -> List[Dict[str, object]]:
    totals: Dict[str, float] = defaultdict(float)
    for row in _rows(session, year, month, exclude_income=True):
        value, ok = convert(row.amount, row.currency, row.exchange_rate)
        if ok:
            totals[row.category] += value
    ordered = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [{"category": c, "total": t} for c, t in ordered]


# ---------- Dashboard (raw view) ----------


def installment_projection(session: Session, month: MonthFilter = None) -> float:
    """
    Expected installment outflow: sum of amount_per_installment over ACTIVE plans,
    x12 for the yearly view. A projection, not payments made.
    """
    try:
        m = parse_month_filter(month)
    except ValueError as ex:
        raise ValidationError(str(ex)) from ex

    stmt = select(func.sum(Installment.amount_per_installment)).where(
        Installment.is_active,
        Installment.installments_paid < Installment.total_installments,
    )
    monthly = float(session.exec(stmt).one() or 0)
    return monthly * 12 if m is None else monthly


def expense_split(session: Session, year: int, month: MonthFilter = None) -> Dict[str, float]:
    """Raw EXPENSE totals split into MAJOR / MICRO by the reference-value threshold."""
    split = {ExpenseSize.MAJOR.value: 0.0, ExpenseSize.MICRO.value: 0.0}
    stmt = _in_period(select(Transaction), year, month).where(
        Transaction.type == TransactionType.EXPENSE
    )
    for row in session.exec(stmt).all():
        size = expense_size(row.amount, row.currency, row.exchange_rate)
        split[size.value] += row.amount
    return split


def dashboard(session: Session, year: int, month: MonthFilter = None) -> Dict[str, float]:
    by_type = summary_by_type(session, year, month)
    split = expense_split(session, year, month)

    income = by_type.get(TransactionType.INCOME.value, 0.0)
    fixed = by_type.get(TransactionType.FIXED_EXPENSE.value, 0.0)
    expenses = by_type.get(TransactionType.EXPENSE.value, 0.0)
    installments = installment_projection(session, month)

    total_expenses = fixed + expenses + installments
    return {
        "income": income,
        "fixed": fixed,
        "expenses": expenses,
        "major": split[ExpenseSize.MAJOR.value],
        "micro": split[ExpenseSize.MICRO.value],
        "installments": installments,
        "total_expenses": total_expenses,
        "balance": income - total_expenses,
    }
