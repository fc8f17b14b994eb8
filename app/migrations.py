# app/migrations.py
"""
One-time upgrade of databases written by earlier versions.

Runs at startup after create_all (see app.db.init_db) and is idempotent:
- add columns that older tables lack (multi-currency, savings pairing)
- rewrite legacy MAJOR_EXPENSE / MICRO_EXPENSE tags to EXPENSE
- SQLite only: epoch-millisecond created_at values -> ISO timestamps

After this step the rest of the app only knows the current model.
"""

from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Connection, Engine

from app.models import LEGACY_TYPE_MAP

logger = logging.getLogger("ff.migrate")

# table -> {column: DDL fragment}
MISSING_COLUMNS = {
    "transactions": {
        "currency": "VARCHAR(3) NOT NULL DEFAULT 'ARS'",
        "exchange_rate": "FLOAT NOT NULL DEFAULT 0",
    },
    "installments": {
        "currency": "VARCHAR(3) NOT NULL DEFAULT 'ARS'",
    },
    "savings_movements": {
        "transaction_id": "INTEGER REFERENCES transactions (id)",
    },
}


def _add_missing_columns(conn: Connection) -> int:
    inspector = inspect(conn)
    tables = set(inspector.get_table_names())
    added = 0
    for table, columns in MISSING_COLUMNS.items():
        if table not in tables:
            continue
        existing = {c["name"] for c in inspector.get_columns(table)}
        for name, ddl in columns.items():
            if name not in existing:
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
                logger.info("Added column %s.%s", table, name)
                added += 1
    return added


def _rewrite_legacy_types(conn: Connection) -> int:
    rewritten = 0
    for legacy, current in LEGACY_TYPE_MAP.items():
        result = conn.execute(
            text("UPDATE transactions SET type = :current WHERE type = :legacy"),
            {"current": current, "legacy": legacy},
        )
        rewritten += result.rowcount or 0
    return rewritten


def _fix_sqlite_timestamps(conn: Connection) -> None:
    # the first server stored Date.now() (ms since epoch) in created_at
    for table in ("transactions",):
        conn.execute(
            text(
                f"UPDATE {table} "
                "SET created_at = datetime(created_at / 1000, 'unixepoch') "
                "WHERE typeof(created_at) = 'integer'"
            )
        )


def upgrade_legacy_schema(bind: Engine) -> None:
    with bind.begin() as conn:
        _add_missing_columns(conn)
        rewritten = _rewrite_legacy_types(conn)
        if rewritten:
            logger.info("Rewrote %s legacy expense rows to EXPENSE", rewritten)
        conn.execute(
            text("UPDATE transactions SET category = 'Otros' WHERE category IS NULL")
        )
        if bind.dialect.name == "sqlite":
            _fix_sqlite_timestamps(conn)
