# app/services/savings.py
"""
Savings accounts, their movement journal, and the balances derived from them.

Every movement has a paired ledger row (SAVING_DEPOSIT / SAVING_WITHDRAWAL)
written in the same commit; deleting the movement deletes that row too.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import case, func
from sqlmodel import Session, select

from app.errors import NotFound, ValidationError
from app.models import (
    Currency,
    MovementType,
    SavingsAccount,
    SavingsMovement,
    Transaction,
    TransactionType,
)
from app.services.currency import convert, is_reference
from app.services.transactions import build_transaction, check_amount, coerce_currency

logger = logging.getLogger("ff.savings")

SAVINGS_CATEGORY = "Ahorro"

ACCOUNT_FIELDS = ("name", "type", "currency", "icon", "color")


# ---------- Accounts ----------


def create_account(
    session: Session,
    *,
    name: str,
    type: str,
    currency: Union[Currency, str, None] = None,
    icon: Optional[str] = None,
    color: Optional[str] = None,
) -> SavingsAccount:
    if not (name or "").strip() or not (type or "").strip():
        raise ValidationError("Name and type are required")
    account = SavingsAccount(
        name=name.strip(),
        type=type.strip(),
        currency=coerce_currency(currency, Currency.USD),
        icon=icon or "wallet",
        color=color or "#6366f1",
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def list_accounts(session: Session) -> List[SavingsAccount]:
    stmt = (
        select(SavingsAccount)
        .where(SavingsAccount.is_active)
        .order_by(SavingsAccount.name)
    )
    return list(session.exec(stmt).all())


def get_account(session: Session, account_id: int) -> SavingsAccount:
    account = session.get(SavingsAccount, account_id)
    if account is None:
        raise NotFound("Account not found")
    return account


def update_account(
    session: Session, account_id: int, changes: Dict[str, Any]
) -> SavingsAccount:
    updates = {k: v for k, v in changes.items() if k in ACCOUNT_FIELDS and v is not None}
    if not updates:
        raise ValidationError("No fields to update")
    account = get_account(session, account_id)
    if "currency" in updates:
        updates["currency"] = coerce_currency(updates["currency"], account.currency)
    for key, value in updates.items():
        setattr(account, key, value)
    session.add(account)
    session.commit()
    session.refresh(account)
    return account


def delete_account(session: Session, account_id: int) -> None:
    """Soft delete: the account disappears from lists, its movements stay."""
    account = get_account(session, account_id)
    account.is_active = False
    session.add(account)
    session.commit()


# ---------- Movements ----------


def _insert_movement(session: Session, movement: SavingsMovement) -> SavingsMovement:
    session.add(movement)
    session.flush()
    return movement


def add_movement(
    session: Session,
    *,
    account_id: int,
    type: Union[MovementType, str],
    amount: float,
    date: date,
    currency: Union[Currency, str, None] = None,
    exchange_rate: Optional[float] = None,
    description: Optional[str] = None,
) -> SavingsMovement:
    """
    Record a deposit/withdrawal and its ledger row in one commit.
    If the movement can't be written, the ledger row is rolled back with it.
    """
    try:
        kind = MovementType((type or "").upper()) if isinstance(type, str) else type
    except ValueError:
        raise ValidationError("Type must be DEPOSIT or WITHDRAWAL") from None
    value = check_amount(amount)
    if date is None:
        raise ValidationError("date is required")
    account = get_account(session, account_id)

    cur = coerce_currency(currency, Currency.USD)
    rate = float(exchange_rate or 0)
    if kind == MovementType.DEPOSIT:
        txn_type = TransactionType.SAVING_DEPOSIT
        default_desc = f"Ahorro → {account.name}"
    else:
        txn_type = TransactionType.SAVING_WITHDRAWAL
        default_desc = f"Retiro ← {account.name}"

    try:
        txn = build_transaction(
            type=txn_type,
            amount=value,
            currency=cur,
            exchange_rate=rate,
            category=SAVINGS_CATEGORY,
            description=description or default_desc,
            date=date,
        )
        session.add(txn)
        session.flush()

        movement = _insert_movement(
            session,
            SavingsMovement(
                account_id=account.id,
                transaction_id=txn.id,
                type=kind,
                amount=value,
                currency=cur,
                exchange_rate=rate,
                description=description or "",
                date=date,
            ),
        )
        session.commit()
    except Exception:
        session.rollback()
        logger.error("Savings movement for account %s rolled back", account_id)
        raise

    session.refresh(movement)
    return movement


def list_movements(
    session: Session, account_id: Optional[int] = None, limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Newest first, with the account's name and color (inactive accounts included)."""
    stmt = select(SavingsMovement, SavingsAccount).join(
        SavingsAccount, SavingsMovement.account_id == SavingsAccount.id
    )
    if account_id is not None:
        stmt = stmt.where(SavingsMovement.account_id == account_id)
    stmt = stmt.order_by(SavingsMovement.date.desc(), SavingsMovement.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)

    rows = []
    for movement, account in session.exec(stmt).all():
        row = movement.model_dump()
        row["account_name"] = account.name
        row["account_color"] = account.color
        rows.append(row)
    return rows


def delete_movement(session: Session, movement_id: int) -> None:
    """Remove a movement together with its paired ledger row."""
    movement = session.get(SavingsMovement, movement_id)
    if movement is None:
        raise NotFound("Movement not found")
    if movement.transaction_id is not None:
        txn = session.get(Transaction, movement.transaction_id)
        if txn is not None:
            session.delete(txn)
    session.delete(movement)
    session.commit()


# ---------- Balances ----------


def portfolio(session: Session) -> Dict[str, Any]:
    """
    Balance per active account in its own currency (deposits - withdrawals).
    total_reference only adds accounts already in the reference currency.
    """
    signed = case(
        (SavingsMovement.type == MovementType.DEPOSIT, SavingsMovement.amount),
        else_=-SavingsMovement.amount,
    )
    stmt = (
        select(SavingsAccount, func.coalesce(func.sum(signed), 0))
        .join(
            SavingsMovement,
            SavingsMovement.account_id == SavingsAccount.id,
            isouter=True,
        )
        .where(SavingsAccount.is_active)
        .group_by(SavingsAccount.id)
        .order_by(SavingsAccount.name)
    )

    accounts = []
    total_reference = 0.0
    for account, balance in session.exec(stmt).all():
        row = account.model_dump()
        row["balance"] = float(balance or 0)
        accounts.append(row)
        if is_reference(account.currency):
            total_reference += row["balance"]
    return {"accounts": accounts, "total_reference": total_reference}


def allocated(session: Session) -> float:
    """Net amount moved into savings, in the reference currency."""
    total = 0.0
    for movement in session.exec(select(SavingsMovement)).all():
        value, ok = convert(movement.amount, movement.currency, movement.exchange_rate)
        if not ok:
            continue
        total += value if movement.type == MovementType.DEPOSIT else -value
    return total


def available(session: Session) -> Dict[str, float]:
    """
    available = (income - expenses) - allocated, all in the reference currency.
    Every non-INCOME ledger row is an expense, SAVING_* rows included.
    """
    income = 0.0
    expenses = 0.0
    for row in session.exec(select(Transaction)).all():
        value, ok = convert(row.amount, row.currency, row.exchange_rate)
        if not ok:
            continue
        if row.type == TransactionType.INCOME:
            income += value
        else:
            expenses += value

    net_balance = income - expenses
    alloc = allocated(session)
    return {
        "income": income,
        "expenses": expenses,
        "net_balance": net_balance,
        "allocated": alloc,
        "available": net_balance - alloc,
    }
