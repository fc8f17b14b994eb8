from __future__ import annotations

import logging
from typing import Generator

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from app.config import get_settings
from app.migrations import upgrade_legacy_schema

settings = get_settings()

# SQLite needs a special connect arg; others (e.g., Postgres) don't.
connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    echo=False,  # set True to see SQL in console
    connect_args=connect_args,
)

# Log which DB URL is actually in use (helps avoid “which financeflow.db?” confusion).
logger = logging.getLogger("db")
logger.info("DB URL in use: %s", engine.url)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency: yields a database session and closes it afterwards."""
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind: Engine | None = None) -> None:
    """
    Create any missing tables.
    Prefer Alembic migrations for schema changes.
    """
    SQLModel.metadata.create_all(bind or engine)


def init_db(bind: Engine | None = None) -> None:
    """Startup: create tables, then bring legacy databases to the current model."""
    target = bind or engine
    create_db_and_tables(target)
    upgrade_legacy_schema(target)
