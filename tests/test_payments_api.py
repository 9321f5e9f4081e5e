import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_customer(client: TestClient) -> int:
    resp = client.post(
        "/customers",
        json={"name": "Acme", "legal_name": "Acme SA", "tax_id": "30712345678", "tax_condition": "REGISTERED"},
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def issue(client: TestClient, customer_id: int, price: str) -> int:
    resp = client.post(
        "/invoices",
        json={
            "customer_id": customer_id,
            "items": [{"description": "Internet", "unit_price": price, "tax_rate_category": "EXEMPT"}],
        },
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def test_settle_returns_consolidated_receipt():
    client = TestClient(app)
    customer_id = create_customer(client)
    first = issue(client, customer_id, "5000.00")
    second = issue(client, customer_id, "3000.00")

    resp = client.post("/payments/settle", json={"invoice_ids": [first, second], "cash_amount": "9000.00"})
    assert resp.status_code == 201
    receipt = resp.json()
    assert receipt["number"] == "00000001"
    assert Decimal(receipt["total_amount"]) == Decimal("9000")
    assert receipt["invoice_summary"] == "Invoice 1-00000001 ($5000.00), Invoice 1-00000002 ($3000.00)"
    assert receipt["breakdown"][-1]["invoice_number"] is None

    customer = client.get(f"/customers/{customer_id}").json()
    assert Decimal(customer["credit_balance"]) == Decimal("1000")
    assert client.get(f"/invoices/{first}").json()["state"] == "PAID"

    assert client.get("/receipts/00000001").json() == receipt
    assert client.get("/receipts/00000099").status_code == 404

    payments = client.get("/payments", params={"customer_id": customer_id}).json()
    assert len(payments) == 2
    assert all(p["receipt_number"] == "00000001" for p in payments)

    single = client.get(f"/payments/{payments[0]['id']}/receipt")
    assert single.status_code == 200
    assert single.json()["number"] == "00000001"


def test_apply_credit_after_overpayment():
    client = TestClient(app)
    customer_id = create_customer(client)
    first = issue(client, customer_id, "1000.00")
    second = issue(client, customer_id, "3000.00")
    client.post("/payments/settle", json={"invoice_ids": [first], "cash_amount": "1500.00"})

    resp = client.post("/payments/apply-credit", json={"customer_id": customer_id, "invoice_ids": [second]})
    assert resp.status_code == 201
    assert resp.json()["display_method"] == "CREDIT_BALANCE"
    assert Decimal(resp.json()["total_amount"]) == Decimal("500")

    invoice = client.get(f"/invoices/{second}").json()
    assert invoice["state"] == "PARTIALLY_PAID"
    assert Decimal(invoice["outstanding_balance"]) == Decimal("2500")

    resp = client.post("/payments/apply-credit", json={"customer_id": customer_id, "invoice_ids": [second]})
    assert resp.status_code == 409


def test_settlement_errors():
    client = TestClient(app)
    customer_id = create_customer(client)
    invoice_id = issue(client, customer_id, "1000.00")

    resp = client.post("/payments/settle", json={"invoice_ids": [invoice_id], "cash_amount": "0"})
    assert resp.status_code == 422
    resp = client.post("/payments/settle", json={"invoice_ids": [invoice_id, 999], "cash_amount": "10"})
    assert resp.status_code == 404
    resp = client.post(
        "/payments/settle", json={"invoice_ids": [invoice_id], "cash_amount": "10", "credit_amount": "5"}
    )
    assert resp.status_code == 409
    assert client.get("/payments").json() == []
