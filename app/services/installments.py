# app/services/installments.py
"""
Installment plans and their payment journal.

States of a plan:
- ACTIVE    is_active and installments_paid < total
- COMPLETE  installments_paid >= total (is_active cleared by the engine)
- INACTIVE  paused by the user while incomplete (toggle_active)

mark_paid is the only writer of the journal. Each call writes one
INSTALLMENT ledger row plus one InstallmentPayment row in a single commit,
then recounts installments_paid from the journal. update_paid_count is a
manual override that bypasses the journal, so count and journal can drift
after it; next_unpaid_number always reads the journal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.errors import DuplicatePayment, InvalidInstallmentNumber, NotFound, ValidationError
from app.models import (
    Currency,
    Installment,
    InstallmentPayment,
    Transaction,
    TransactionType,
)
from app.services.currency import is_reference
from app.services.transactions import build_transaction, coerce_currency

logger = logging.getLogger("ff.installments")

INSTALLMENT_CATEGORY = "Cuotas"

REQUIRED_FIELDS = (
    "description",
    "card_name",
    "amount_per_installment",
    "total_installments",
    "installments_paid",
    "start_date",
)


class PlanState(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETE = "COMPLETE"
    INACTIVE = "INACTIVE"


@dataclass
class PaymentResult:
    transaction_id: int
    payment_number: int
    new_paid_count: int
    is_complete: bool


def derive_active(paid: int, total: int) -> bool:
    return paid < total


def plan_state(plan: Installment) -> PlanState:
    if plan.installments_paid >= plan.total_installments:
        return PlanState.COMPLETE
    return PlanState.ACTIVE if plan.is_active else PlanState.INACTIVE


# ---------- Plans ----------


def create_plan(session: Session, data: Dict[str, Any]) -> Installment:
    """
    Store a plan exactly as declared by the caller.
    Only presence of fields is checked; is_active defaults to True.
    """
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))

    is_active = data.get("is_active")
    plan = Installment(
        description=data["description"],
        card_name=data["card_name"],
        amount_per_installment=float(data["amount_per_installment"]),
        total_installments=int(data["total_installments"]),
        installments_paid=int(data["installments_paid"]),
        start_date=data["start_date"],
        is_active=True if is_active is None else bool(is_active),
        currency=coerce_currency(data.get("currency"), Currency.ARS),
    )
    session.add(plan)
    session.commit()
    session.refresh(plan)
    return plan


def list_plans(session: Session, active_only: bool = False) -> List[Installment]:
    stmt = select(Installment)
    if active_only:
        stmt = stmt.where(Installment.is_active)
    stmt = stmt.order_by(Installment.start_date.desc(), Installment.id.desc())
    return list(session.exec(stmt).all())


def get_plan(session: Session, plan_id: int) -> Installment:
    plan = session.get(Installment, plan_id)
    if plan is None:
        raise NotFound("Installment not found")
    return plan


def delete_plan(session: Session, plan_id: int) -> None:
    """
    Remove a plan and its payment journal.
    The INSTALLMENT transactions those payments created stay in the ledger.
    """
    plan = get_plan(session, plan_id)
    for payment in session.exec(
        select(InstallmentPayment).where(InstallmentPayment.installment_id == plan_id)
    ).all():
        session.delete(payment)
    session.delete(plan)
    session.commit()
    logger.info("Deleted installment plan %s (ledger rows kept)", plan_id)


def toggle_active(session: Session, plan_id: int) -> Installment:
    plan = get_plan(session, plan_id)
    plan.is_active = not plan.is_active
    session.add(plan)
    session.commit()
    session.refresh(plan)
    return plan


def update_paid_count(session: Session, plan_id: int, new_count: int) -> Installment:
    """
    Manual correction of installments_paid. Does NOT touch the journal,
    so the count may no longer match the recorded payments.
    """
    plan = get_plan(session, plan_id)
    if new_count is None:
        raise ValidationError("installments_paid is required")
    if new_count < 0 or new_count > plan.total_installments:
        raise ValidationError(
            f"installments_paid must be between 0 and {plan.total_installments}"
        )
    plan.installments_paid = new_count
    plan.is_active = derive_active(new_count, plan.total_installments)
    session.add(plan)
    session.commit()
    session.refresh(plan)
    return plan


# ---------- Journal ----------


def paid_numbers(session: Session, plan_id: int) -> List[int]:
    stmt = (
        select(InstallmentPayment.installment_number)
        .where(InstallmentPayment.installment_id == plan_id)
        .order_by(InstallmentPayment.installment_number)
    )
    return list(session.exec(stmt).all())


def count_payments(session: Session, plan_id: int) -> int:
    stmt = select(func.count(InstallmentPayment.id)).where(
        InstallmentPayment.installment_id == plan_id
    )
    return session.exec(stmt).one()


def next_unpaid_number(session: Session, plan_id: int) -> Optional[int]:
    """First number in 1..total missing from the journal (None when all paid)."""
    plan = get_plan(session, plan_id)
    taken = set(paid_numbers(session, plan_id))
    for number in range(1, plan.total_installments + 1):
        if number not in taken:
            return number
    return None


def list_payments(session: Session, plan_id: int) -> List[Dict[str, Any]]:
    """Journal rows joined with the amount/currency/rate of their ledger entry."""
    get_plan(session, plan_id)
    stmt = (
        select(InstallmentPayment, Transaction)
        .join(Transaction, InstallmentPayment.transaction_id == Transaction.id, isouter=True)
        .where(InstallmentPayment.installment_id == plan_id)
        .order_by(InstallmentPayment.installment_number)
    )
    rows = []
    for payment, txn in session.exec(stmt).all():
        row = payment.model_dump()
        row["amount"] = txn.amount if txn else None
        row["currency"] = txn.currency if txn else None
        row["exchange_rate"] = txn.exchange_rate if txn else None
        rows.append(row)
    return rows


def _journal_payment(
    session: Session,
    plan: Installment,
    number: int,
    txn: Transaction,
    payment_date: date,
) -> InstallmentPayment:
    payment = InstallmentPayment(
        installment_id=plan.id,
        transaction_id=txn.id,
        installment_number=number,
        payment_date=payment_date,
    )
    session.add(payment)
    return payment


def payable_number(
    session: Session, plan: Installment, installment_number: Optional[int] = None
) -> int:
    """Number the next payment would get; raises when it is out of range or taken."""
    total = plan.total_installments
    number = installment_number if installment_number is not None else plan.installments_paid + 1
    if number < 1 or number > total:
        raise InvalidInstallmentNumber(f"Installment number must be between 1 and {total}")

    already = session.exec(
        select(InstallmentPayment.id).where(
            InstallmentPayment.installment_id == plan.id,
            InstallmentPayment.installment_number == number,
        )
    ).first()
    if already is not None:
        raise DuplicatePayment(f"Installment {number} of plan {plan.id} is already paid")
    return number


def mark_paid(
    session: Session,
    plan_id: int,
    exchange_rate: Optional[float] = None,
    installment_number: Optional[int] = None,
    payment_date: Optional[date] = None,
) -> PaymentResult:
    """
    Pay one installment of a plan (at most once per number).

    - number defaults to installments_paid + 1
    - reference-currency plans always record rate 1
    - ledger row + journal row are committed together or not at all
    """
    plan = get_plan(session, plan_id)
    total = plan.total_installments
    number = payable_number(session, plan, installment_number)

    rate = 1.0 if is_reference(plan.currency) else float(exchange_rate or 0)
    when = payment_date or date.today()

    try:
        txn = build_transaction(
            type=TransactionType.INSTALLMENT,
            amount=plan.amount_per_installment,
            currency=plan.currency,
            exchange_rate=rate,
            category=INSTALLMENT_CATEGORY,
            description=f"{plan.description} ({number}/{total})",
            date=when,
        )
        session.add(txn)
        session.flush()  # assigns txn.id for the journal row

        _journal_payment(session, plan, number, txn, when)
        session.flush()

        paid = count_payments(session, plan_id)
        plan.installments_paid = paid
        plan.is_active = derive_active(paid, total)
        session.add(plan)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicatePayment(
            f"Installment {number} of plan {plan_id} is already paid"
        ) from None
    except Exception:
        session.rollback()
        raise

    logger.info(
        "Plan %s: paid installment %s/%s (txn %s)", plan_id, number, total, txn.id
    )
    return PaymentResult(
        transaction_id=txn.id,
        payment_number=number,
        new_paid_count=paid,
        is_complete=paid >= total,
    )
