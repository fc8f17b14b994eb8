"""
Startup upgrade of a database written by the first (ARS-only, MAJOR/MICRO) version.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import text
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from app.db import init_db
from app.models import Currency, Installment, Transaction, TransactionType

LEGACY_SCHEMA = [
    """
    CREATE TABLE transactions (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      type TEXT NOT NULL,
      amount REAL NOT NULL,
      category TEXT,
      description TEXT,
      date TEXT NOT NULL,
      created_at INTEGER
    )
    """,
    """
    CREATE TABLE installments (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      description TEXT NOT NULL,
      card_name TEXT NOT NULL,
      amount_per_installment REAL NOT NULL,
      total_installments INTEGER NOT NULL,
      installments_paid INTEGER NOT NULL,
      start_date TEXT NOT NULL,
      is_active INTEGER DEFAULT 1
    )
    """,
]


def _legacy_engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    with engine.begin() as conn:
        for ddl in LEGACY_SCHEMA:
            conn.execute(text(ddl))
        conn.execute(
            text(
                "INSERT INTO transactions (type, amount, category, description, date, created_at) VALUES "
                "('MAJOR_EXPENSE', 50000, 'Tecnología', 'Auriculares', '2024-05-02', 1714600000000),"
                "('MICRO_EXPENSE', 1200, NULL, 'Café', '2024-05-03', 1714700000000),"
                "('INCOME', 900000, 'Ingreso', 'Sueldo', '2024-05-01', 1714500000000)"
            )
        )
        conn.execute(
            text(
                "INSERT INTO installments (description, card_name, amount_per_installment, "
                "total_installments, installments_paid, start_date, is_active) "
                "VALUES ('Heladera', 'Visa', 80000, 12, 4, '2024-01-15', 1)"
            )
        )
    return engine


def test_legacy_rows_are_upgraded():
    engine = _legacy_engine()
    init_db(engine)

    with Session(engine) as s:
        rows = s.exec(select(Transaction).order_by(Transaction.date)).all()
        assert [r.type for r in rows] == [
            TransactionType.INCOME,
            TransactionType.EXPENSE,
            TransactionType.EXPENSE,
        ]
        assert all(r.currency == Currency.ARS for r in rows)
        assert all(r.exchange_rate == 0 for r in rows)
        assert rows[2].category == "Otros"
        assert rows[0].date == date(2024, 5, 1)
        assert rows[0].created_at.year == 2024

        plan = s.exec(select(Installment)).one()
        assert plan.currency == Currency.ARS
        assert plan.is_active is True


def test_upgrade_is_idempotent(test_engine):
    # test_engine already went through init_db once
    init_db(test_engine)
    init_db(test_engine)
    with Session(test_engine) as s:
        assert s.exec(select(Transaction)).all() == []
