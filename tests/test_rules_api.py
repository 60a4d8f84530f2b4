"""Integration tests for the commission and VAT rule endpoints."""

from __future__ import annotations

import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from rate_rules.infrastructure.database import get_db, initialize_database


ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Email": "admin@example.com"}


@pytest.fixture()
def client():
    """Serve the app against a fresh in-memory database."""

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    initialize_database(engine)
    testing_session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _override_get_db():
        db = testing_session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
        engine.dispose()


def _create_commission_rule(client, **overrides):
    payload = {
        "name": "Seller X default",
        "primary_key": "seller-x",
        "rate": "8",
        "effective_from": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return client.post("/commission-rules/", json=payload, headers=ADMIN_HEADERS)


def test_create_and_read_commission_rule(client):
    response = _create_commission_rule(client, fixed_fee="0.25")

    assert response.status_code == 201
    created = response.json()
    assert created["version"] == 1
    assert created["created_by_user_id"] == "admin-1"
    assert created["description"] == "Seller: seller-x - 8.0000% + 0.25 fixed"

    fetched = client.get(f"/commission-rules/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Seller X default"


def test_create_without_actor_is_rejected(client):
    response = client.post(
        "/commission-rules/",
        json={"name": "No actor", "rate": "5", "effective_from": "2024-01-01T00:00:00Z"},
    )

    assert response.status_code == 400
    assert response.json()["detail"]["errors"] == ["User ID is required."]


def test_overlapping_rule_returns_conflict(client):
    first = _create_commission_rule(client).json()

    response = _create_commission_rule(
        client, name="Overlap", effective_from="2024-06-01T00:00:00Z"
    )

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["kind"] == "conflict"
    assert [rule["id"] for rule in detail["conflicting_rules"]] == [first["id"]]


def test_resolve_uses_category_then_general_rule(client):
    _create_commission_rule(client)
    _create_commission_rule(
        client, name="Electronics", category_id="electronics", rate="15"
    )

    specific = client.get(
        "/commission-rules/resolve",
        params={
            "primary_key": "seller-x",
            "category_id": "electronics",
            "as_of": "2024-03-01T00:00:00Z",
        },
    )
    general = client.get(
        "/commission-rules/resolve",
        params={
            "primary_key": "seller-x",
            "category_id": "books",
            "as_of": "2024-03-01T00:00:00Z",
        },
    )
    missing = client.get(
        "/commission-rules/resolve",
        params={"primary_key": "seller-y", "as_of": "2024-03-01T00:00:00Z"},
    )

    assert specific.json()["applied_rule"]["name"] == "Electronics"
    assert general.json()["applied_rule"]["name"] == "Seller X default"
    assert missing.status_code == 200
    assert missing.json() == {"found": False, "rate": None, "applied_rule": None}


def test_update_and_history_flow(client):
    created = _create_commission_rule(client).json()

    updated = client.put(
        f"/commission-rules/{created['id']}",
        json={"rate": "9", "effective_to": "2025-01-01T00:00:00Z", "reason": "Promo"},
        headers=ADMIN_HEADERS,
    )
    stale = client.put(
        f"/commission-rules/{created['id']}",
        json={"rate": "10", "expected_version": 1},
        headers=ADMIN_HEADERS,
    )
    deleted = client.delete(
        f"/commission-rules/{created['id']}",
        params={"reason": "Retired"},
        headers=ADMIN_HEADERS,
    )
    history = client.get(f"/commission-rules/{created['id']}/history")

    assert updated.status_code == 200
    assert updated.json()["version"] == 2
    assert stale.status_code == 409
    assert deleted.status_code == 204
    body = history.json()
    assert body["rule_exists"] is False
    assert body["current_rule"] is None
    assert [entry["change_type"] for entry in body["history"]] == [
        "Created",
        "Updated",
        "Deleted",
    ]
    assert body["history"][1]["reason"] == "Promo"
    assert body["history"][2]["new_values"] == "{}"


def test_missing_rule_returns_not_found(client):
    response = client.get("/vat-rules/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
    assert response.json()["detail"]["errors"] == ["VAT rule not found."]


def test_vat_rules_are_separate_from_commission_rules(client):
    vat = client.post(
        "/vat-rules/",
        json={
            "name": "Germany standard",
            "primary_key": "de",
            "rate": "19",
            "effective_from": "2024-01-01T00:00:00Z",
        },
        headers=ADMIN_HEADERS,
    )
    invalid = client.post(
        "/vat-rules/",
        json={"name": "Bad", "rate": "19", "effective_from": "2024-01-01T00:00:00Z"},
        headers=ADMIN_HEADERS,
    )

    assert vat.status_code == 201
    assert vat.json()["primary_key"] == "DE"
    assert vat.json()["fixed_fee"] is None
    assert invalid.status_code == 400
    assert invalid.json()["detail"]["errors"] == ["Country code is required."]
    assert client.get("/commission-rules/").json() == []
    assert len(client.get("/vat-rules/").json()) == 1


def test_family_history_category_case_and_rate_precision(client):
    created = _create_commission_rule(client, category_id="Books").json()

    foreign = client.get(f"/vat-rules/{created['id']}/history")
    lowercase = _create_commission_rule(client, name="Lowercase books", category_id="books")
    too_precise = _create_commission_rule(
        client, name="Precise", category_id="music", rate="8.123456"
    )

    assert foreign.status_code == 404
    assert foreign.json()["detail"]["errors"] == ["VAT rule not found."]
    assert lowercase.status_code == 409
    assert too_precise.status_code == 400
    assert too_precise.json()["detail"]["errors"] == [
        "Commission rate cannot have more than 4 decimal places."
    ]
