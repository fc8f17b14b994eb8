# app/routers/fixed_expenses.py
# Purpose: recurring bills (FIXED_EXPENSE rows): month view, edit, replicate.

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.db import get_session
from app.services.fixed_expenses import fixed_expenses_for_month, replicate
from app.services.transactions import update_fixed_expense

router = APIRouter(prefix="/api/fixed-expenses", tags=["fixed-expenses"])


class FixedExpenseUpdate(BaseModel):
    description: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    category: Optional[str] = None
    exchange_rate: Optional[float] = None


class ReplicateIn(BaseModel):
    year: int
    month: int
    exchange_rate: Optional[float] = None  # fallback for ARS rows


@router.get("/month/{year}/{month}")
def month_view(year: int, month: int, session: Session = Depends(get_session)):
    return fixed_expenses_for_month(session, year, month)


@router.patch("/{txn_id}")
def update(
    txn_id: int, body: FixedExpenseUpdate, session: Session = Depends(get_session)
):
    update_fixed_expense(session, txn_id, body.model_dump(exclude_unset=True))
    return {"message": "Fixed expense updated successfully"}


@router.post("/replicate")
def replicate_month(body: ReplicateIn, session: Session = Depends(get_session)):
    report = replicate(session, body.year, body.month, body.exchange_rate)
    if report.failed:
        message = f"Se crearon {report.created} gastos fijos, pero {report.failed} fallaron"
    else:
        message = f"Se crearon {report.created} gastos fijos"
    return {
        "message": message,
        "count": report.created,
        "failed": report.failed,
        "items": [item.__dict__ for item in report.items],
    }
