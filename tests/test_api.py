"""
HTTP layer: routing, status codes, error bodies, rate lookup wiring.
"""

from __future__ import annotations

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.models import Transaction, TransactionType


def _plan(client, **overrides):
    body = {
        "description": "TV",
        "card_name": "Master",
        "amount_per_installment": 60000,
        "total_installments": 3,
        "installments_paid": 0,
        "start_date": "2025-01-05",
    }
    body.update(overrides)
    r = client.post("/api/installments", json=body)
    assert r.status_code == 201
    return r.json()["id"]


def test_health(client: TestClient):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_create_transaction_looks_up_missing_rate(client, rates, test_engine):
    r = client.post(
        "/api/transactions",
        json={"type": "EXPENSE", "amount": 2000, "date": "2025-03-04", "category": "Ocio"},
    )
    assert r.status_code == 201
    assert len(rates.calls) == 1

    with Session(test_engine) as s:
        txn = s.get(Transaction, r.json()["id"])
        assert txn.exchange_rate == 1000

    listed = client.get("/api/transactions", params={"year": 2025, "month": "03"}).json()
    assert [t["category"] for t in listed] == ["Ocio"]


def test_create_transaction_keeps_given_rate(client, rates):
    r = client.post(
        "/api/transactions",
        json={"type": "INCOME", "amount": 10, "currency": "USD", "date": "2025-03-04"},
    )
    assert r.status_code == 201
    assert rates.calls == []


def test_list_transactions_filters_by_type(client):
    for kind in ("INCOME", "EXPENSE"):
        client.post(
            "/api/transactions",
            json={"type": kind, "amount": 5, "currency": "USD", "date": "2025-04-02"},
        )

    listed = client.get("/api/transactions", params={"year": 2025, "type": "INCOME"}).json()
    assert [t["type"] for t in listed] == ["INCOME"]

    bad = client.get("/api/transactions", params={"year": 2025, "type": "GIFT"})
    assert bad.status_code == 400


def test_validation_errors_use_error_body(client):
    r = client.post(
        "/api/transactions", json={"type": "EXPENSE", "amount": -1, "date": "2025-03-04"}
    )
    assert r.status_code == 400
    assert "amount" in r.json()["error"]

    r = client.get("/api/transactions/summary", params={"year": 2025, "month": "13"})
    assert r.status_code == 400


def test_delete_missing_transaction_is_404(client):
    r = client.delete("/api/transactions/12345")
    assert r.status_code == 404
    assert r.json() == {"error": "Transaction not found"}


def test_mark_paid_flow(client, rates):
    plan_id = _plan(client)

    r = client.post(
        f"/api/installments/{plan_id}/mark-paid",
        json={"payment_date": "2025-02-05", "installment_number": 2},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["payment_number"] == 2
    assert body["new_paid_count"] == 1
    assert body["is_complete"] is False
    assert len(rates.calls) == 1  # ARS plan without rate -> looked up

    dup = client.post(
        f"/api/installments/{plan_id}/mark-paid", json={"installment_number": 2}
    )
    assert dup.status_code == 409
    out_of_range = client.post(
        f"/api/installments/{plan_id}/mark-paid", json={"installment_number": 4}
    )
    assert out_of_range.status_code == 400
    # rejected payments never reach the rate lookup
    assert len(rates.calls) == 1

    nxt = client.get(f"/api/installments/{plan_id}/next-unpaid").json()
    assert nxt == {"installment_number": 1}

    payments = client.get(f"/api/installments/{plan_id}/payments").json()
    assert [p["installment_number"] for p in payments] == [2]
    assert payments[0]["exchange_rate"] == 1000


def test_installment_admin_endpoints(client):
    plan_id = _plan(client)

    r = client.patch(f"/api/installments/{plan_id}/paid", json={"installments_paid": 3})
    assert r.status_code == 200
    assert r.json()["is_active"] is False

    r = client.patch(f"/api/installments/{plan_id}/toggle")
    assert r.json()["is_active"] is True

    assert client.get("/api/installments", params={"activeOnly": "true"}).json()[0]["id"] == plan_id

    assert client.delete(f"/api/installments/{plan_id}").status_code == 200
    assert client.delete(f"/api/installments/{plan_id}").status_code == 404


def test_create_installment_missing_fields(client):
    r = client.post("/api/installments", json={"description": "TV"})
    assert r.status_code == 400
    assert "Missing required fields" in r.json()["error"]


def test_fixed_expense_replicate_endpoint(client, test_engine):
    r = client.post(
        "/api/transactions",
        json={
            "type": "FIXED_EXPENSE",
            "amount": 15000,
            "exchange_rate": 1000,
            "description": "Internet",
            "category": "Servicios",
            "date": "2024-12-10",
        },
    )
    assert r.status_code == 201
    txn_id = r.json()["id"]

    r = client.patch(f"/api/fixed-expenses/{txn_id}", json={"amount": 16000})
    assert r.status_code == 200

    r = client.post("/api/fixed-expenses/replicate", json={"year": 2025, "month": 1})
    assert r.status_code == 200
    assert r.json()["count"] == 1
    assert r.json()["failed"] == 0

    again = client.post("/api/fixed-expenses/replicate", json={"year": 2025, "month": 1})
    assert again.status_code == 400

    month = client.get("/api/fixed-expenses/month/2025/1").json()
    assert [(m["description"], m["amount"], m["date"]) for m in month] == [
        ("Internet", 16000, "2025-01-01")
    ]

    with Session(test_engine) as s:
        fixed = s.exec(
            select(Transaction).where(Transaction.type == TransactionType.FIXED_EXPENSE)
        ).all()
        assert len(fixed) == 2


def test_savings_endpoints(client):
    r = client.post("/api/savings/accounts", json={"name": "Broker", "type": "broker"})
    assert r.status_code == 201
    account_id = r.json()["id"]

    client.post(
        "/api/transactions",
        json={"type": "INCOME", "amount": 1000, "currency": "USD", "date": "2025-01-01"},
    )
    r = client.post(
        "/api/savings/movements",
        json={"account_id": account_id, "type": "DEPOSIT", "amount": 200, "date": "2025-01-02"},
    )
    assert r.status_code == 201
    assert r.json()["transaction_id"] is not None

    portfolio = client.get("/api/savings/portfolio").json()
    assert portfolio["total_reference"] == 200

    available = client.get("/api/savings/available").json()
    assert available["expenses"] == 200
    assert available["available"] == 600

    movements = client.get("/api/savings/movements", params={"account_id": account_id}).json()
    assert movements[0]["account_name"] == "Broker"

    assert client.delete(f"/api/savings/movements/{movements[0]['id']}").status_code == 200
    assert client.get("/api/savings/available").json()["available"] == 1000

    bad = client.post(
        "/api/savings/movements",
        json={"account_id": account_id, "type": "MOVE", "amount": 1, "date": "2025-01-02"},
    )
    assert bad.status_code == 400

    assert client.delete(f"/api/savings/accounts/{account_id}").status_code == 200
    assert client.get("/api/savings/accounts").json() == []
