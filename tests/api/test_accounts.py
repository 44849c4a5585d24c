"""
API tests for accounts and money movement.
"""

import pytest


@pytest.fixture
def customer_id(client, auth_headers):
    response = client.post("/customers", headers=auth_headers, json={
        "first_name": "Jane",
        "last_name": "Banda",
        "national_id": "NID-API-1",
    })
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def open_account(client, auth_headers, customer_id):
    def _open(initial_balance="0.00", account_type="savings"):
        response = client.post("/accounts", headers=auth_headers, json={
            "customer_id": customer_id,
            "account_type": account_type,
            "initial_balance": initial_balance,
        })
        assert response.status_code == 201, response.text
        return response.json()

    return _open


# --- Opening accounts ---

def test_open_account(open_account, customer_id):
    account = open_account("100.00")

    assert account["customer_id"] == customer_id
    assert account["account_type"] == "savings"
    assert account["balance"] == "100.00"
    assert account["account_number"].startswith("ACC")


def test_open_account_for_unknown_customer(client, auth_headers):
    response = client.post("/accounts", headers=auth_headers, json={
        "customer_id": 999,
        "account_type": "current",
    })

    assert response.status_code == 404
    assert response.json() == {
        "error": "not_found",
        "detail": "Customer 999 not found",
    }


def test_get_account(client, auth_headers, open_account):
    account = open_account("5.00")

    response = client.get(f"/accounts/{account['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["account_number"] == account["account_number"]


def test_list_accounts_for_customer(client, auth_headers, open_account, customer_id):
    open_account()
    open_account(account_type="current")

    response = client.get(f"/accounts/customer/{customer_id}", headers=auth_headers)

    assert [a["account_type"] for a in response.json()] == ["savings", "current"]


# --- Money movement ---

def test_deposit(client, auth_headers, open_account):
    account = open_account("100.00")

    response = client.post(
        f"/accounts/{account['id']}/deposit",
        headers=auth_headers,
        json={"amount": "50.00"},
    )

    assert response.status_code == 200
    assert response.json()["balance"] == "150.00"


def test_withdraw_more_than_balance(client, auth_headers, open_account):
    account = open_account("100.00")

    response = client.post(
        f"/accounts/{account['id']}/withdraw",
        headers=auth_headers,
        json={"amount": "150.00"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "insufficient_funds"
    assert "Insufficient funds" in body["detail"]

    balance = client.get(f"/accounts/{account['id']}", headers=auth_headers)
    assert balance.json()["balance"] == "100.00"


@pytest.mark.parametrize("amount", ["-5", "0", "1.234"])
def test_invalid_amounts_rejected(client, auth_headers, open_account, amount):
    account = open_account("10.00")

    response = client.post(
        f"/accounts/{account['id']}/deposit",
        headers=auth_headers,
        json={"amount": amount},
    )

    assert response.status_code == 422


def test_transfer(client, auth_headers, open_account):
    source = open_account("100.00")
    target = open_account("0.00")

    response = client.post(
        f"/accounts/{source['id']}/transfer/{target['id']}",
        headers=auth_headers,
        json={"amount": "50.00"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["from_account"]["balance"] == "50.00"
    assert body["to_account"]["balance"] == "50.00"


def test_transfer_to_same_account(client, auth_headers, open_account):
    account = open_account("100.00")

    response = client.post(
        f"/accounts/{account['id']}/transfer/{account['id']}",
        headers=auth_headers,
        json={"amount": "10.00"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot transfer to the same account"


def test_transfer_to_missing_account(client, auth_headers, open_account):
    source = open_account("100.00")

    response = client.post(
        f"/accounts/{source['id']}/transfer/999",
        headers=auth_headers,
        json={"amount": "10.00"},
    )

    assert response.status_code == 404
    balance = client.get(f"/accounts/{source['id']}", headers=auth_headers)
    assert balance.json()["balance"] == "100.00"


def test_idempotency_key_header(client, auth_headers, open_account):
    account = open_account("10.00")
    headers = {**auth_headers, "Idempotency-Key": "till-42"}

    for _ in range(3):
        response = client.post(
            f"/accounts/{account['id']}/deposit",
            headers=headers,
            json={"amount": "5.00"},
        )
        assert response.status_code == 200
        assert response.json()["balance"] == "15.00"


# --- History ---

def test_account_transactions(client, auth_headers, open_account):
    source = open_account("100.00")
    target = open_account()
    client.post(
        f"/accounts/{source['id']}/transfer/{target['id']}",
        headers=auth_headers,
        json={"amount": "40.00"},
    )

    response = client.get(f"/accounts/{source['id']}/transactions", headers=auth_headers)

    assert response.status_code == 200
    history = response.json()
    assert [t["type"] for t in history] == ["transfer_out", "deposit"]
    assert history[0]["counterparty_account_id"] == target["id"]
    assert history[0]["amount"] == "40.00"


def test_transactions_of_missing_account(client, auth_headers):
    response = client.get("/accounts/404/transactions", headers=auth_headers)
    assert response.status_code == 404


def test_recent_transactions(client, auth_headers, open_account):
    account = open_account("1.00")
    for _ in range(3):
        client.post(
            f"/accounts/{account['id']}/deposit",
            headers=auth_headers,
            json={"amount": "1.00"},
        )

    response = client.get("/accounts/recent/all?limit=2", headers=auth_headers)

    assert response.status_code == 200
    recent = response.json()
    assert len(recent) == 2
    assert recent[0]["first_name"] == "Jane"
    assert recent[0]["account_number"] == account["account_number"]


# --- Access ---

def test_requires_token(client):
    response = client.get("/accounts/1")

    assert response.status_code == 401
    assert response.json() == {
        "error": "unauthorized",
        "detail": "Access denied. No token provided.",
    }
