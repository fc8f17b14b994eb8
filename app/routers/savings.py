# app/routers/savings.py
# Purpose: savings accounts, movements (each paired with a ledger row),
# portfolio balances and the "available to save" figure.

from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlmodel import Session

from app.db import get_session
from app.services import savings
from app.services.rates import RateLookup, get_rate_lookup, resolve_rate

router = APIRouter(prefix="/api/savings", tags=["savings"])


class AccountIn(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    currency: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class MovementIn(BaseModel):
    account_id: int
    type: str  # DEPOSIT | WITHDRAWAL
    amount: float
    date: dt.date
    currency: Optional[str] = None
    exchange_rate: Optional[float] = None
    description: Optional[str] = None


# ---------- Accounts ----------


@router.get("/accounts")
def list_accounts(session: Session = Depends(get_session)):
    return savings.list_accounts(session)


@router.post("/accounts", status_code=status.HTTP_201_CREATED)
def create_account(body: AccountIn, session: Session = Depends(get_session)):
    account = savings.create_account(
        session,
        name=body.name or "",
        type=body.type or "",
        currency=body.currency,
        icon=body.icon,
        color=body.color,
    )
    return {"id": account.id, "message": "Account created successfully"}


@router.patch("/accounts/{account_id}")
def update_account(
    account_id: int, body: AccountIn, session: Session = Depends(get_session)
):
    savings.update_account(session, account_id, body.model_dump(exclude_unset=True))
    return {"message": "Account updated successfully"}


@router.delete("/accounts/{account_id}")
def delete_account(account_id: int, session: Session = Depends(get_session)):
    savings.delete_account(session, account_id)
    return {"message": "Account deleted successfully"}


# ---------- Movements ----------


@router.get("/movements")
def list_movements(
    account_id: Optional[int] = None,
    limit: Optional[int] = None,
    session: Session = Depends(get_session),
):
    return savings.list_movements(session, account_id=account_id, limit=limit)


@router.post("/movements", status_code=status.HTTP_201_CREATED)
def add_movement(
    body: MovementIn,
    session: Session = Depends(get_session),
    rates: RateLookup = Depends(get_rate_lookup),
):
    currency = body.currency or "USD"
    rate = resolve_rate(rates, currency, body.exchange_rate, body.date)
    movement = savings.add_movement(
        session,
        account_id=body.account_id,
        type=body.type,
        amount=body.amount,
        date=body.date,
        currency=currency,
        exchange_rate=rate,
        description=body.description,
    )
    return {
        "id": movement.id,
        "transaction_id": movement.transaction_id,
        "message": "Movement and transaction created successfully",
    }


@router.delete("/movements/{movement_id}")
def delete_movement(movement_id: int, session: Session = Depends(get_session)):
    savings.delete_movement(session, movement_id)
    return {"message": "Movement deleted successfully"}


# ---------- Balances ----------


@router.get("/portfolio")
def portfolio(session: Session = Depends(get_session)):
    return savings.portfolio(session)


@router.get("/available")
def available(session: Session = Depends(get_session)):
    return savings.available(session)
