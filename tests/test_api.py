"""
Integration tests for the Bank Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from fastapi.testclient import TestClient

from bank_ledger.api import create_app
from bank_ledger.system import LedgerSystem


CUSTOMER = {
    "first_name": "John",
    "last_name": "Doe",
    "email": "john.doe@email.com",
    "phone_number": "+1234567890",
    "date_of_birth": "1990-01-15",
    "address": "123 Main St, City, State 12345"
}


@pytest.fixture
def client():
    """Test client over a fresh ledger"""
    return TestClient(create_app(LedgerSystem()))


@pytest.fixture
def customer_id(client):
    r = client.post("/customers", json=CUSTOMER)
    assert r.status_code == 201
    return r.json()["id"]


def open_account(client, customer_id, account_type="SAVINGS", initial_deposit="1000.00"):
    r = client.post("/accounts", json={
        "customer_id": customer_id,
        "account_type": account_type,
        "initial_deposit": initial_deposit
    })
    assert r.status_code == 201, r.text
    return r.json()["id"]


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        data = r.json()
        assert data["name"] == "Bank Ledger API"
        assert "accounts" in data["endpoints"]


class TestCustomerFlow:
    """End-to-end customer management tests"""

    def test_create_and_get(self, client, customer_id):
        r = client.get(f"/customers/{customer_id}")
        assert r.status_code == 200
        data = r.json()
        assert data["full_name"] == "John Doe"
        assert data["is_active"] is True

    def test_duplicate_email_conflict(self, client, customer_id):
        r = client.post("/customers", json=dict(CUSTOMER, email="JOHN.DOE@email.com"))
        assert r.status_code == 409
        assert r.json()["detail"]["code"] == "duplicate_email"

    def test_invalid_customer(self, client):
        r = client.post("/customers", json=dict(CUSTOMER, date_of_birth="2020-01-01"))
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "invalid_transaction"

    def test_unknown_customer(self, client):
        r = client.get("/customers/missing")
        assert r.status_code == 404
        assert r.json()["detail"]["code"] == "customer_not_found"

    def test_lookup_and_deactivate(self, client, customer_id):
        r = client.get("/customers/lookup", params={"email": "John.Doe@Email.com"})
        assert r.status_code == 200
        assert r.json()["id"] == customer_id

        r = client.post(f"/customers/{customer_id}/deactivate")
        assert r.json()["is_active"] is False
        r = client.get("/customers", params={"active_only": True})
        assert r.json()["customers"] == []


class TestAccountFlow:
    """End-to-end account and transaction tests"""

    def test_create_account(self, client, customer_id):
        account_id = open_account(client, customer_id, "checking", "250.00")
        r = client.get(f"/accounts/{account_id}")
        data = r.json()
        assert data["balance"] == "250.00"
        assert data["account_type"] == "CHECKING"
        assert data["interest_rate"] == "0.01"

        r = client.get(f"/customers/{customer_id}/accounts")
        assert [a["id"] for a in r.json()["accounts"]] == [account_id]

    def test_unknown_account_type(self, client, customer_id):
        r = client.post("/accounts", json={
            "customer_id": customer_id, "account_type": "BROKERAGE", "initial_deposit": "10"
        })
        assert r.status_code == 400

    def test_invalid_initial_deposit(self, client, customer_id):
        r = client.post("/accounts", json={
            "customer_id": customer_id, "account_type": "SAVINGS", "initial_deposit": "0"
        })
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "invalid_amount"

    def test_deposit_withdraw_and_history(self, client, customer_id):
        account_id = open_account(client, customer_id, initial_deposit="500.00")

        r = client.post(f"/accounts/{account_id}/deposit", json={"amount": "100.00"})
        assert r.status_code == 200
        assert r.json()["balance_after"] == "600.00"

        r = client.post(f"/accounts/{account_id}/withdraw",
                        json={"amount": "50.00", "description": "ATM withdrawal"})
        assert r.json()["balance_after"] == "550.00"

        r = client.get(f"/accounts/{account_id}/balance")
        assert r.json()["balance"] == "550.00"

        r = client.get(f"/accounts/{account_id}/transactions")
        data = r.json()
        assert [t["transaction_type"] for t in data["transactions"]] == [
            "WITHDRAWAL", "DEPOSIT", "DEPOSIT"
        ]
        assert data["total_deposits"] == "600.00"
        assert data["total_withdrawals"] == "50.00"

    def test_insufficient_funds(self, client, customer_id):
        account_id = open_account(client, customer_id, initial_deposit="500.00")
        r = client.post(f"/accounts/{account_id}/withdraw", json={"amount": "600.00"})
        assert r.status_code == 400
        detail = r.json()["detail"]
        assert detail["code"] == "insufficient_funds"
        assert detail["available"] == "500.00"

    def test_unknown_account(self, client):
        r = client.post("/accounts/missing/deposit", json={"amount": "10"})
        assert r.status_code == 404
        assert r.json()["detail"]["code"] == "account_not_found"

    def test_interest_and_fee(self, client, customer_id):
        account_id = open_account(client, customer_id, initial_deposit="1000.00")

        r = client.post(f"/accounts/{account_id}/interest")
        assert r.json()["interest"] == "30.00"

        r = client.post(f"/accounts/{account_id}/fees", json={"amount": "5.00"})
        assert r.json()["transaction_type"] == "FEE"
        assert r.json()["balance_after"] == "1025.00"

    def test_deactivated_account_rejects_deposit(self, client, customer_id):
        account_id = open_account(client, customer_id)
        client.post(f"/accounts/{account_id}/deactivate")

        r = client.post(f"/accounts/{account_id}/deposit", json={"amount": "10"})
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "invalid_transaction"

        r = client.get("/accounts", params={"active_only": True})
        assert r.json()["accounts"] == []


class TestTransferFlow:
    """Transfer and transaction search tests"""

    def test_transfer(self, client, customer_id):
        source = open_account(client, customer_id, initial_deposit="1000.00")
        destination = open_account(client, customer_id, "CHECKING", "500.00")

        r = client.post("/transactions/transfer", json={
            "from_account_id": source, "to_account_id": destination, "amount": "300.00"
        })
        assert r.status_code == 200
        data = r.json()
        assert data["debit"]["balance_after"] == "700.00"
        assert data["credit"]["balance_after"] == "800.00"

        r = client.get("/transactions", params={"reference": data["reference"]})
        assert len(r.json()["transactions"]) == 2

        r = client.get(f"/transactions/{data['debit']['id']}")
        assert r.json()["account_id"] == source

    def test_transfer_same_account(self, client, customer_id):
        account_id = open_account(client, customer_id)
        r = client.post("/transactions/transfer", json={
            "from_account_id": account_id, "to_account_id": account_id, "amount": "1.00"
        })
        assert r.status_code == 400

    def test_search_by_type_and_account(self, client, customer_id):
        account_id = open_account(client, customer_id)
        client.post(f"/accounts/{account_id}/withdraw", json={"amount": "1.00"})

        r = client.get("/transactions", params={"transaction_type": "withdrawal"})
        assert len(r.json()["transactions"]) == 1

        r = client.get("/transactions", params={"account_id": account_id})
        assert len(r.json()["transactions"]) == 2

        r = client.get("/transactions", params={"transaction_type": "bogus"})
        assert r.status_code == 400

    def test_unknown_transaction(self, client):
        r = client.get("/transactions/missing")
        assert r.status_code == 404


class TestReports:
    """Reporting endpoint tests"""

    def test_summary(self, client, customer_id):
        open_account(client, customer_id, initial_deposit="5000.00")
        open_account(client, customer_id, "CHECKING", "1000.00")

        r = client.get("/reports/summary")
        data = r.json()
        assert data["total_customers"] == 1
        assert data["total_accounts"] == 2
        assert data["total_balance"] == "6000.00"
        assert data["average_balance"] == "3000.00"
        assert data["accounts_by_type"] == {"Savings Account": 1, "Checking Account": 1}

        r = client.get("/reports/high-value", params={"threshold": "4000"})
        assert len(r.json()["accounts"]) == 1

        r = client.get("/reports/high-value", params={"threshold": "lots"})
        assert r.status_code == 400
