from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from chemist.core.config import settings
from chemist.core.jwt import create_access_token
from chemist.database import get_db
from chemist.main import app
from chemist.models.medicines import Medicine
from chemist.services.accounts import create_user
from chemist.services.inventory import create_medicine

from conftest import ADMIN_PHONE


# =============================================================================
# FIXTURES
#
# Requests run in their own sessions; seeding happens in short-lived
# sessions that are closed before the client is used.
# =============================================================================

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def accounts(session_factory):
    with session_factory() as session:
        admin = create_user(session, "admin@pharmacy.co.ke", "Str0ng-admin-pass", "Grace Admin", "admin")
        cashier = create_user(session, "cashier@pharmacy.co.ke", "Str0ng-cashier-pass", "Tom Cashier", "cashier")

        return {
            "admin": {"Authorization": f"Bearer {create_access_token(admin.id, admin.role)}"},
            "cashier": {"Authorization": f"Bearer {create_access_token(cashier.id, cashier.role)}"},
            "cashier_id": cashier.id,
        }


@pytest.fixture
def shelf(session_factory):
    with session_factory() as session:
        return {
            name: create_medicine(session, name, Decimal(cost), quantity).medicine.id
            for name, quantity, cost in [
                ("Paracetamol", 50, "10.00"),
                ("Amoxicillin", 30, "25.00"),
                ("Cetirizine", 3, "8.50"),
            ]
        }


# =============================================================================
# AUTH
# =============================================================================

def test_health(client):
    assert client.get("/").json() == {"message": "Chemist POS API is running"}


def test_login_and_me(client, accounts):
    response = client.post(
        "/auth/login",
        data={"username": "Cashier@pharmacy.co.ke", "password": "Str0ng-cashier-pass"},
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200

    body = me.json()
    assert body["user"]["role"] == "cashier"
    granted = {(p["resource"], p["action"]) for p in body["permissions"]}
    assert ("sales", "create") in granted
    assert ("suppliers", "read") not in granted


def test_bad_login(client, accounts):
    response = client.post(
        "/auth/login",
        data={"username": "cashier@pharmacy.co.ke", "password": "not-the-password"},
    )

    assert response.status_code == 401


def test_requests_need_a_token(client):
    assert client.get("/medicines").status_code == 401
    assert client.get("/medicines", headers={"Authorization": "Bearer garbage"}).status_code == 401


# =============================================================================
# ACCESS POLICY
# =============================================================================

@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/suppliers"),
        ("get", "/intake"),
        ("get", "/settings"),
        ("get", "/users"),
        ("delete", "/medicines/1"),
    ],
)
def test_cashier_denied(client, accounts, method, path):
    response = getattr(client, method)(path, headers=accounts["cashier"])

    assert response.status_code == 403
    assert response.json() == {"detail": "Not permitted"}


def test_cashier_may_correct_quantity_only(client, accounts, shelf):
    path = f"/medicines/{shelf['Paracetamol']}"

    renamed = client.put(path, json={"name": "Panadol"}, headers=accounts["cashier"])
    assert renamed.status_code == 403

    counted = client.put(path, json={"quantity": 47}, headers=accounts["cashier"])
    assert counted.status_code == 200
    assert counted.json()["quantity"] == 47
    assert counted.json()["name"] == "Paracetamol"


# =============================================================================
# CHECKOUT
# =============================================================================

def test_checkout(client, accounts, shelf, session_factory):
    response = client.post(
        "/sales",
        json={
            "items": [
                {"medicine_id": shelf["Paracetamol"], "quantity": 2, "unit_price": "10.00"},
                {"medicine_id": shelf["Amoxicillin"], "quantity": 1, "unit_price": "25.00"},
            ],
            "payment_method": "cash",
        },
        headers=accounts["cashier"],
    )

    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["total_amount"]) == Decimal("45.00")
    assert body["sale_number"].endswith("-0001")
    assert body["cashier_id"] == accounts["cashier_id"]
    assert len(body["items"]) == 2
    assert {int(k): v for k, v in body["stock"].items()} == {
        shelf["Paracetamol"]: 48,
        shelf["Amoxicillin"]: 29,
    }

    listed = client.get("/sales", headers=accounts["cashier"]).json()
    assert [sale["id"] for sale in listed] == [body["id"]]

    fetched = client.get(f"/sales/{body['id']}", headers=accounts["admin"])
    assert fetched.json()["sale_number"] == body["sale_number"]


def test_checkout_insufficient_stock(client, accounts, shelf, session_factory):
    response = client.post(
        "/sales",
        json={"items": [{"medicine_id": shelf["Cetirizine"], "quantity": 5}]},
        headers=accounts["cashier"],
    )

    assert response.status_code == 409
    assert "Cetirizine" in response.json()["detail"]

    with session_factory() as session:
        assert session.get(Medicine, shelf["Cetirizine"]).quantity == 3


def test_checkout_empty_cart(client, accounts):
    response = client.post("/sales", json={"items": []}, headers=accounts["cashier"])

    assert response.status_code == 422
    assert response.json()["field"] == "items"


def test_checkout_unknown_medicine(client, accounts):
    response = client.post(
        "/sales",
        json={"items": [{"medicine_id": 999, "quantity": 1}]},
        headers=accounts["cashier"],
    )

    assert response.status_code == 404
    assert response.json() == {"detail": "Medicine not found"}


def test_checkout_broadcasts_after_response(client, accounts, shelf, sms_outbox, monkeypatch):
    monkeypatch.setattr(settings, "SALE_ALERT_PHONE", "+254742048000")

    response = client.post(
        "/sales",
        json={"items": [{"medicine_id": shelf["Paracetamol"], "quantity": 1}]},
        headers=accounts["cashier"],
    )

    assert response.status_code == 201
    assert len(sms_outbox) == 1
    assert "Cashier: Tom Cashier" in sms_outbox[0][1]


# =============================================================================
# ADMIN
# =============================================================================

def test_missing_medicine(client, accounts):
    response = client.get("/medicines/4040", headers=accounts["admin"])

    assert response.status_code == 404


def test_settings_round_trip(client, accounts):
    default = client.get("/settings", headers=accounts["admin"]).json()
    assert default["low_stock_threshold"] == settings.DEFAULT_LOW_STOCK_THRESHOLD

    response = client.put(
        "/settings",
        json={"admin_phone": ADMIN_PHONE, "low_stock_threshold": 5},
        headers=accounts["admin"],
    )

    assert response.status_code == 200
    assert response.json()["admin_phone"] == ADMIN_PHONE
    assert response.json()["low_stock_threshold"] == 5


def test_intake_sync_over_http(client, accounts, sms_outbox):
    admin = accounts["admin"]

    supplier = client.post(
        "/suppliers",
        json={"name": "Mary Wanjiru", "phone": "+254722333444", "company": "MediSupply Kenya"},
        headers=admin,
    ).json()

    batch = client.post(
        "/intake",
        json={
            "supplier_id": supplier["id"],
            "product_name": "Metformin",
            "batch_number": "MTF-2026-001",
            "quantity": 50,
            "cost_per_unit": "4.20",
            "expiry_date": (date.today() + timedelta(days=365)).isoformat(),
        },
        headers=admin,
    )
    assert batch.status_code == 201
    assert Decimal(batch.json()["total_cost"]) == Decimal("210.00")

    synced = client.post(f"/intake/{batch.json()['id']}/sync", json={"quantity": 20}, headers=admin)
    assert synced.status_code == 200
    assert synced.json()["created"] is True
    assert synced.json()["quantity_in_stock"] == 20
    assert synced.json()["quantity_remaining_in_batch"] == 30

    too_many = client.post(f"/intake/{batch.json()['id']}/sync", json={"quantity": 31}, headers=admin)
    assert too_many.status_code == 422
    assert too_many.json()["field"] == "quantity"


def test_expired_batch_rejected(client, accounts):
    admin = accounts["admin"]
    supplier = client.post(
        "/suppliers",
        json={"name": "Mary Wanjiru", "phone": "+254722333444", "company": "MediSupply Kenya"},
        headers=admin,
    ).json()

    response = client.post(
        "/intake",
        json={
            "supplier_id": supplier["id"],
            "product_name": "Metformin",
            "batch_number": "MTF-OLD",
            "quantity": 10,
            "cost_per_unit": "4.20",
            "expiry_date": (date.today() - timedelta(days=1)).isoformat(),
        },
        headers=admin,
    )

    assert response.status_code == 422
    assert response.json()["field"] == "expiry_date"


def test_admin_creates_cashier(client, accounts):
    response = client.post(
        "/users",
        json={"email": "amina@pharmacy.co.ke", "password": "Str0ng-amina-pass", "full_name": "Amina"},
        headers=accounts["admin"],
    )

    assert response.status_code == 201
    assert response.json()["role"] == "cashier"

    login = client.post(
        "/auth/login",
        data={"username": "amina@pharmacy.co.ke", "password": "Str0ng-amina-pass"},
    )
    assert login.status_code == 200


# =============================================================================
# BOOTSTRAP
# =============================================================================

def test_bootstrap_admin(client, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_ADMIN_SECRET", "let-me-in")
    payload = {"email": "owner@pharmacy.co.ke", "password": "Str0ng-owner-pass", "full_name": "Owner"}

    denied = client.post("/internal/bootstrap-admin", params={"secret": "wrong"}, json=payload)
    assert denied.status_code == 403

    created = client.post("/internal/bootstrap-admin", params={"secret": "let-me-in"}, json=payload)
    assert created.status_code == 201
    assert created.json()["role"] == "admin"

    again = client.post(
        "/internal/bootstrap-admin",
        params={"secret": "let-me-in"},
        json={**payload, "email": "second@pharmacy.co.ke"},
    )
    assert again.status_code == 409


def test_bootstrap_disabled_without_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "INTERNAL_ADMIN_SECRET", None)

    response = client.post(
        "/internal/bootstrap-admin",
        params={"secret": "anything"},
        json={"email": "owner@pharmacy.co.ke", "password": "Str0ng-owner-pass"},
    )

    assert response.status_code == 403
