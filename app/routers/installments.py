# app/routers/installments.py
# Purpose: installment plans and their payment journal.

from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlmodel import Session

from app.db import get_session
from app.services import installments as plans
from app.services.rates import RateLookup, get_rate_lookup, resolve_rate

router = APIRouter(prefix="/api/installments", tags=["installments"])


class InstallmentIn(BaseModel):
    # all optional here so the service can answer "Missing required fields"
    description: Optional[str] = None
    card_name: Optional[str] = None
    amount_per_installment: Optional[float] = None
    total_installments: Optional[int] = None
    installments_paid: Optional[int] = None
    start_date: Optional[dt.date] = None
    is_active: Optional[bool] = None
    currency: Optional[str] = None


class PaidCountIn(BaseModel):
    installments_paid: Optional[int] = None


class MarkPaidIn(BaseModel):
    exchange_rate: Optional[float] = None
    payment_date: Optional[dt.date] = None
    installment_number: Optional[int] = None


@router.post("", status_code=status.HTTP_201_CREATED)
def create(body: InstallmentIn, session: Session = Depends(get_session)):
    plan = plans.create_plan(session, body.model_dump())
    return {"id": plan.id, "message": "Installment created successfully"}


@router.get("")
def list_(activeOnly: bool = False, session: Session = Depends(get_session)):
    return plans.list_plans(session, active_only=activeOnly)


@router.patch("/{plan_id}/paid")
def update_paid(
    plan_id: int, body: PaidCountIn, session: Session = Depends(get_session)
):
    plan = plans.update_paid_count(session, plan_id, body.installments_paid)
    return {"message": "Installment updated successfully", "is_active": plan.is_active}


@router.patch("/{plan_id}/toggle")
def toggle(plan_id: int, session: Session = Depends(get_session)):
    plan = plans.toggle_active(session, plan_id)
    return {
        "message": "Installment status toggled successfully",
        "is_active": plan.is_active,
    }


@router.delete("/{plan_id}")
def delete(plan_id: int, session: Session = Depends(get_session)):
    plans.delete_plan(session, plan_id)
    return {"message": "Installment deleted successfully"}


@router.post("/{plan_id}/mark-paid")
def mark_paid(
    plan_id: int,
    body: MarkPaidIn,
    session: Session = Depends(get_session),
    rates: RateLookup = Depends(get_rate_lookup),
):
    plan = plans.get_plan(session, plan_id)
    # reject bad or duplicate numbers before any rate lookup
    plans.payable_number(session, plan, body.installment_number)
    rate = resolve_rate(rates, plan.currency, body.exchange_rate, body.payment_date)
    result = plans.mark_paid(
        session,
        plan_id,
        exchange_rate=rate,
        installment_number=body.installment_number,
        payment_date=body.payment_date,
    )
    return {
        "message": f"Cuota {result.payment_number} registrada",
        "transaction_id": result.transaction_id,
        "payment_number": result.payment_number,
        "new_paid_count": result.new_paid_count,
        "is_complete": result.is_complete,
    }


@router.get("/{plan_id}/payments")
def payments(plan_id: int, session: Session = Depends(get_session)):
    return plans.list_payments(session, plan_id)


@router.get("/{plan_id}/next-unpaid")
def next_unpaid(plan_id: int, session: Session = Depends(get_session)):
    return {"installment_number": plans.next_unpaid_number(session, plan_id)}
