# app/routers/transactions.py
# Purpose: ledger entries (create/list/delete) and the dashboard rollups.
# - Missing exchange_rate for an ARS entry is looked up for the entry date.
# - Summaries accept month=all|01..12; "-usd" variants are normalized.

from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlmodel import Session

from app.db import get_session
from app.services import summary
from app.services.rates import RateLookup, get_rate_lookup, resolve_rate
from app.services.transactions import (
    create_transaction,
    delete_transaction,
    list_transactions,
)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


class TransactionIn(BaseModel):
    type: str  # INCOME, EXPENSE, ... (MAJOR_/MICRO_EXPENSE accepted)
    amount: float
    date: dt.date
    currency: Optional[str] = None
    exchange_rate: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None


@router.post("", status_code=status.HTTP_201_CREATED)
def create(
    body: TransactionIn,
    session: Session = Depends(get_session),
    rates: RateLookup = Depends(get_rate_lookup),
):
    rate = resolve_rate(rates, body.currency, body.exchange_rate, body.date)
    txn = create_transaction(
        session,
        type=body.type,
        amount=body.amount,
        date=body.date,
        currency=body.currency,
        exchange_rate=rate,
        category=body.category,
        description=body.description,
    )
    return {"id": txn.id, "message": "Transaction created successfully"}


@router.get("")
def list_(
    year: int,
    month: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    session: Session = Depends(get_session),
):
    return list_transactions(session, year, month, category, type)


@router.delete("/{txn_id}")
def delete(txn_id: int, session: Session = Depends(get_session)):
    delete_transaction(session, txn_id)
    return {"message": "Transaction deleted successfully"}


# ---------- Rollups ----------


@router.get("/summary")
def summary_raw(
    year: int, month: Optional[str] = None, session: Session = Depends(get_session)
):
    return summary.summary_by_type(session, year, month)


@router.get("/summary-usd")
def summary_normalized(
    year: int, month: Optional[str] = None, session: Session = Depends(get_session)
):
    return summary.summary_by_type_normalized(session, year, month)


@router.get("/expenses-by-category")
def by_category_raw(
    year: int, month: Optional[str] = None, session: Session = Depends(get_session)
):
    return summary.summary_by_category(session, year, month)


@router.get("/expenses-by-category-usd")
def by_category_normalized(
    year: int, month: Optional[str] = None, session: Session = Depends(get_session)
):
    return summary.summary_by_category_normalized(session, year, month)


@router.get("/dashboard")
def dashboard(
    year: int,
    month: Optional[str] = Query(None, description="all or 01..12"),
    session: Session = Depends(get_session),
):
    return summary.dashboard(session, year, month)
