# app/services/fixed_expenses.py
"""
Recurring bills: FIXED_EXPENSE ledger rows copied month to month.

replicate() copies last month's fixed expenses into the target month,
skipping descriptions already present there. Each copy is committed on its
own: a failing row is reported in the result list and never undoes the
rows that made it. Running it again only fills what is still missing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.errors import AllAlreadyExist, NoSourceData, ValidationError
from app.models import Transaction, TransactionType
from app.period_ym import month_bounds, previous_month
from app.services.currency import is_reference
from app.services.transactions import build_transaction

logger = logging.getLogger("ff.fixed")


@dataclass
class ReplicationItem:
    description: Optional[str]
    ok: bool
    transaction_id: Optional[int] = None
    error: Optional[str] = None


@dataclass
class ReplicationReport:
    year: int
    month: int
    items: List[ReplicationItem] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for i in self.items if i.ok)

    @property
    def failed(self) -> int:
        return sum(1 for i in self.items if not i.ok)


def _bounds(year: int, month: int):
    try:
        return month_bounds(year, month)
    except ValueError as ex:
        raise ValidationError(str(ex)) from ex


def fixed_expenses_for_month(session: Session, year: int, month: int) -> List[Transaction]:
    start, end = _bounds(year, month)
    stmt = (
        select(Transaction)
        .where(
            Transaction.type == TransactionType.FIXED_EXPENSE,
            Transaction.date >= start,
            Transaction.date < end,
        )
        .order_by(Transaction.description)
    )
    return list(session.exec(stmt).all())


def _descriptions_in_month(session: Session, year: int, month: int) -> Set[Optional[str]]:
    return {t.description for t in fixed_expenses_for_month(session, year, month)}


def replication_rate(source: Transaction, fallback_rate: Optional[float]) -> float:
    """1 for reference-currency rows, else the fallback, else the source's own rate."""
    if is_reference(source.currency):
        return 1.0
    return float(fallback_rate or source.exchange_rate or 0)


def _copy_fixed_expense(
    session: Session, source: Transaction, target_date: date, rate: float
) -> Transaction:
    txn = build_transaction(
        type=TransactionType.FIXED_EXPENSE,
        amount=source.amount,
        currency=source.currency,
        exchange_rate=rate,
        category=source.category,
        description=source.description,
        date=target_date,
    )
    session.add(txn)
    session.commit()
    session.refresh(txn)
    return txn


def replicate(
    session: Session,
    year: int,
    month: int,
    fallback_rate: Optional[float] = None,
) -> ReplicationReport:
    """Copy the previous month's fixed expenses into (year, month)."""
    target_start, _ = _bounds(year, month)
    prev_year, prev_month = previous_month(year, month)

    sources = fixed_expenses_for_month(session, prev_year, prev_month)
    if not sources:
        raise NoSourceData("No hay gastos fijos en el mes anterior para replicar")

    existing = _descriptions_in_month(session, year, month)
    to_create = [s for s in sources if s.description not in existing]
    if not to_create:
        raise AllAlreadyExist("Todos los gastos fijos ya existen en este mes")

    report = ReplicationReport(year=year, month=month)
    for source in to_create:
        description = source.description
        try:
            txn = _copy_fixed_expense(
                session, source, target_start, replication_rate(source, fallback_rate)
            )
        except (SQLAlchemyError, ValidationError) as ex:
            session.rollback()
            logger.error("Replicating %r into %s-%02d failed: %s", description, year, month, ex)
            report.items.append(ReplicationItem(description=description, ok=False, error=str(ex)))
            continue
        report.items.append(
            ReplicationItem(description=description, ok=True, transaction_id=txn.id)
        )

    logger.info(
        "Replicated fixed expenses %s-%02d -> %s-%02d: %s created, %s failed",
        prev_year,
        prev_month,
        year,
        month,
        report.created,
        report.failed,
    )
    return report
