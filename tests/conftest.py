# tests/conftest.py
# Test setup: in-memory SQLite shared across threads, dependency overrides
# for the DB session and the rate lookup (no network in tests).

import os
import sys
from pathlib import Path

# Must be set before app.config is imported (Settings reads env at import).
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REFERENCE_CURRENCY"] = "USD"
os.environ["SECONDARY_CURRENCY"] = "ARS"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402

# Ensure repo root on sys.path so "import app" works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import app.models as _models  # noqa: F401,E402  # registers tables on SQLModel.metadata
from app.db import get_session, init_db  # noqa: E402

# Import the FastAPI app with an alias (avoid name collision with package "app")
from app.main import app as fastapi_app  # noqa: E402
from app.services.rates import get_rate_lookup  # noqa: E402


class StubRates:
    """Stands in for RateLookup: fixed rate, remembers the dates asked for."""

    def __init__(self, rate: float = 1000.0):
        self.rate = rate
        self.calls = []

    def get_rate(self, day):
        self.calls.append(day)
        return self.rate


@pytest.fixture()
def test_engine():
    # StaticPool: one connection, so TestClient's worker threads see the same DB
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(test_engine):
    with Session(test_engine) as s:
        yield s


@pytest.fixture()
def rates():
    return StubRates()


@pytest.fixture()
def client(test_engine, rates):
    def _get_test_session():
        with Session(test_engine) as s:
            yield s

    fastapi_app.dependency_overrides[get_session] = _get_test_session
    fastapi_app.dependency_overrides[get_rate_lookup] = lambda: rates
    with TestClient(fastapi_app) as c:
        yield c
    fastapi_app.dependency_overrides.clear()
