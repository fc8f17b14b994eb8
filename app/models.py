# app/models.py
import datetime as dt  # "date" is also a column name below, so keep the module prefix
from enum import Enum  # small enums for clarity
from typing import Optional  # nullable fields

from sqlalchemy import DateTime  # timezone-aware created_at columns
from sqlmodel import (
    UniqueConstraint,  # one journal row per (plan, installment number)
)
from sqlmodel import (  # SQLModel base + columns
    Field,
    SQLModel,
)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Currency(str, Enum):
    ARS = "ARS"  # secondary: needs a captured rate to normalize
    USD = "USD"  # reference by default (see Settings.reference_currency)


class TransactionType(str, Enum):
    INCOME = "INCOME"
    FIXED_EXPENSE = "FIXED_EXPENSE"  # recurring bills, replicated month to month
    EXPENSE = "EXPENSE"
    INSTALLMENT = "INSTALLMENT"  # written by installment "mark paid" only
    SAVING_DEPOSIT = "SAVING_DEPOSIT"
    SAVING_WITHDRAWAL = "SAVING_WITHDRAWAL"

    @classmethod
    def from_tag(cls, tag: str) -> "TransactionType":
        """Accept current tags and the legacy MAJOR/MICRO expense tags."""
        tag = (tag or "").strip().upper()
        return cls(LEGACY_TYPE_MAP.get(tag, tag))


class LegacyTransactionType(str, Enum):
    # earlier schema split EXPENSE by a 15-reference-unit threshold
    MAJOR_EXPENSE = "MAJOR_EXPENSE"
    MICRO_EXPENSE = "MICRO_EXPENSE"


# legacy tag -> current tag; used by the startup migration and on input
LEGACY_TYPE_MAP = {
    LegacyTransactionType.MAJOR_EXPENSE.value: TransactionType.EXPENSE.value,
    LegacyTransactionType.MICRO_EXPENSE.value: TransactionType.EXPENSE.value,
}


class MovementType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class Transaction(SQLModel, table=True):
    """
    A single ledger entry of money moving in/out.
    Direction lives in `type`; `amount` is always positive.
    `exchange_rate` is ARS per USD at the time of writing (0 = unknown).
    """

    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    type: TransactionType = Field(index=True)
    amount: float
    currency: Currency = Field(default=Currency.ARS)
    exchange_rate: float = Field(default=0)
    category: str = Field(default="Otros", index=True)
    description: Optional[str] = None
    date: dt.date = Field(index=True)
    created_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class Installment(SQLModel, table=True):
    """A card purchase paid over `total_installments` equal payments."""

    __tablename__ = "installments"

    id: Optional[int] = Field(default=None, primary_key=True)
    description: str
    card_name: str
    amount_per_installment: float
    total_installments: int
    installments_paid: int = Field(default=0)
    start_date: dt.date
    is_active: bool = Field(default=True)  # auto-cleared on completion, user can toggle
    currency: Currency = Field(default=Currency.ARS)  # legacy plans were ARS-only


class InstallmentPayment(SQLModel, table=True):
    """Payment journal: proof that installment N of a plan was paid."""

    __tablename__ = "installment_payments"

    id: Optional[int] = Field(default=None, primary_key=True)
    installment_id: int = Field(index=True, foreign_key="installments.id")
    transaction_id: int = Field(foreign_key="transactions.id")
    installment_number: int
    payment_date: dt.date
    created_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint(
            "installment_id",
            "installment_number",
            name="uq_installment_payments_number",
        ),
    )


class SavingsAccount(SQLModel, table=True):
    __tablename__ = "savings_accounts"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    type: str  # free text: "bank", "broker", "crypto", "cash"...
    currency: Currency = Field(default=Currency.USD)
    icon: str = Field(default="wallet")
    color: str = Field(default="#6366f1")
    is_active: bool = Field(default=True)  # soft delete keeps history queryable


class SavingsMovement(SQLModel, table=True):
    __tablename__ = "savings_movements"

    id: Optional[int] = Field(default=None, primary_key=True)
    account_id: int = Field(index=True, foreign_key="savings_accounts.id")
    # paired SAVING_DEPOSIT / SAVING_WITHDRAWAL ledger row
    transaction_id: Optional[int] = Field(default=None, foreign_key="transactions.id")
    type: MovementType
    amount: float
    currency: Currency = Field(default=Currency.USD)
    exchange_rate: float = Field(default=0)
    description: str = Field(default="")
    date: dt.date = Field(index=True)
    created_at: dt.datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
