from datetime import datetime, timedelta

import pytest

from app.modules.pricing.service import compute_fee, fallback_rates
from app.modules.shipments.utils import calculate_eta, format_address, generate_tracking_number
from app.shared.database.models import PricingConfig


def test_compute_fee_formula():
    assert compute_fee((45000, 50, 100), 1200, 35) == 45000 + 50 * 1200 + 100 * 35


def test_compute_fee_missing_inputs_count_as_zero():
    assert compute_fee((1000, 50, 10), None, None) == 1000


def test_compute_fee_keeps_full_precision():
    assert compute_fee((0, 0.125, 0), 0.1, None) == pytest.approx(0.0125)


def test_fallback_rates_for_unknown_service_type():
    assert fallback_rates("hovercraft") == (1000, 50, 10)
    assert fallback_rates("express") == (2500, 100, 20)


@pytest.mark.parametrize("service_type, days", [
    ("express", 1),
    ("priority", 2),
    ("standard", 5),
    ("economy", 7),
    ("5 tons", 5),
    (" EXPRESS ", 1),
])
def test_calculate_eta(service_type, days):
    now = datetime(2026, 3, 1, 12, 0)
    assert calculate_eta(service_type, now=now) == now + timedelta(days=days)


def test_tracking_number_format():
    number = generate_tracking_number(datetime(2026, 3, 1))
    prefix, day, suffix = number.split("-")
    assert prefix == "BLY"
    assert day == "20260301"
    assert len(suffix) == 5
    assert suffix == suffix.upper()


def test_format_address():
    assert format_address({"address": "14 Creek Road", "city": "Lagos", "state": None}) == "14 Creek Road, Lagos"
    assert format_address("  Ibadan ") == "Ibadan"
    assert format_address(None) is None


def test_list_seeds_defaults_when_empty(client, db):
    response = client.get("/api/v1/pricing")
    assert response.status_code == 200
    service_types = [config["service_type"] for config in response.json()]
    assert sorted(service_types) == ["10 tons", "15 tons", "5 tons"]
    assert db.query(PricingConfig).count() == 3


def test_calculate_uses_active_config(client, db):
    db.add(PricingConfig(service_type="5 tons", base_price=40000, price_per_kg=10, price_per_km=20, is_active=True))
    db.commit()

    response = client.post("/api/v1/pricing/calculate", json={"serviceType": "5 tons", "weight": 100, "distance": 10})
    assert response.status_code == 200
    assert response.json()["estimated_price"] == 40000 + 10 * 100 + 20 * 10


def test_calculate_falls_back_when_config_inactive(client, db):
    db.add(PricingConfig(service_type="express", base_price=1, price_per_kg=1, price_per_km=1, is_active=False))
    db.commit()

    response = client.post("/api/v1/pricing/calculate", json={"serviceType": "express", "weight": 10, "distance": 5})
    assert response.status_code == 200
    assert response.json()["estimated_price"] == 2500 + 100 * 10 + 20 * 5


def test_calculate_requires_service_type(client):
    response = client.post("/api/v1/pricing/calculate", json={"weight": 10})
    assert response.status_code == 400
    assert response.json()["detail"] == "Service type is required"


def test_create_and_update_config_admin_only(client, admin_headers, customer_headers):
    payload = {"serviceType": "Express", "base_price": 3000, "price_per_kg": 120, "price_per_km": 25}

    assert client.post("/api/v1/pricing", json=payload, headers=customer_headers).status_code == 403

    created = client.post("/api/v1/pricing", json=payload, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["service_type"] == "express"

    duplicate = client.post("/api/v1/pricing", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409

    config_id = created.json()["id"]
    updated = client.put(f"/api/v1/pricing/{config_id}", json={"base_price": 3500}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["config"]["base_price"] == 3500
    assert updated.json()["config"]["price_per_kg"] == 120


def test_update_unknown_config(client, admin_headers):
    response = client.put(
        "/api/v1/pricing/00000000-0000-0000-0000-000000000000",
        json={"base_price": 1},
        headers=admin_headers
    )
    assert response.status_code == 404
