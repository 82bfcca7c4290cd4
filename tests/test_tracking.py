from datetime import timedelta

from app.shared.database.models import TrackingEvent
from app.shared.utils.helpers import utcnow
from conftest import make_shipment


def add_event(db, shipment, status, minutes_ago, description=None):
    event = TrackingEvent(
        shipment_id=shipment.id,
        status=status,
        description=description,
        created_at=utcnow() - timedelta(minutes=minutes_ago)
    )
    db.add(event)
    db.commit()
    return event


def test_public_tracking_newest_event_first(client, db, customer):
    shipment = make_shipment(db, customer, status="in_transit")
    add_event(db, shipment, "pending", 60, "Shipment created and pending pickup")
    add_event(db, shipment, "in_transit", 5, "Left Lagos hub")

    response = client.get(f"/api/v1/tracking/{shipment.tracking_number}")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "in_transit"
    assert [e["description"] for e in body["events"]] == ["Left Lagos hub", "Shipment created and pending pickup"]


def test_public_tracking_unknown_number(client):
    response = client.get("/api/v1/tracking/BLY-20260101-FFFFF")
    assert response.status_code == 404
    assert response.json()["detail"] == "No shipment found with this tracking number"


def test_history_is_chronological(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer)
    add_event(db, shipment, "pending", 60)
    add_event(db, shipment, "processing", 5)

    history = client.get(f"/api/v1/tracking/{shipment.id}/history", headers=customer_headers).json()
    assert [e["status"] for e in history] == ["pending", "processing"]

    timeline = client.get(f"/api/v1/tracking/{shipment.id}/timeline", headers=customer_headers).json()
    assert [e["status"] for e in timeline] == ["processing", "pending"]


def test_timeline_forbidden_for_other_user(client, db, customer, other_headers):
    shipment = make_shipment(db, customer)
    response = client.get(f"/api/v1/tracking/{shipment.id}/timeline", headers=other_headers)
    assert response.status_code == 403


def test_active_shipments(client, db, customer, other_customer, customer_headers, admin_headers):
    make_shipment(db, customer, status="in_transit")
    make_shipment(db, customer, status="delivered")
    make_shipment(db, other_customer, status="processing")

    assert client.get("/api/v1/tracking/active").json() == []
    assert len(client.get("/api/v1/tracking/active", headers=customer_headers).json()) == 1
    assert len(client.get("/api/v1/tracking/active", headers=admin_headers).json()) == 2


def test_location_without_driver(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer)
    response = client.get(f"/api/v1/tracking/{shipment.id}/location", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Location not available"


def test_location_of_assigned_driver(client, db, customer, customer_headers, driver):
    driver.current_lat = 6.5244
    driver.current_lng = 3.3792
    driver.last_location_update = utcnow()
    db.commit()
    shipment = make_shipment(db, customer, status="in_transit", driver_id=driver.id)

    body = client.get(f"/api/v1/tracking/{shipment.id}/location", headers=customer_headers).json()
    assert body["lat"] == 6.5244
    assert body["lng"] == 3.3792
    assert body["message"] is None


def test_driver_of_shipment(client, db, customer, customer_headers, driver):
    unassigned = make_shipment(db, customer)
    response = client.get(f"/api/v1/tracking/{unassigned.id}/driver", headers=customer_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "No driver assigned to this shipment"

    assigned = make_shipment(db, customer, driver_id=driver.id)
    body = client.get(f"/api/v1/tracking/{assigned.id}/driver", headers=customer_headers).json()
    assert body["id"] == str(driver.id)
    assert body["name"] == "Emeka Driver"


def test_eta(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer, estimated_delivery=utcnow() + timedelta(days=5))
    body = client.get(f"/api/v1/tracking/{shipment.id}/eta", headers=customer_headers).json()
    assert body["status"] == "pending"
    assert body["eta"] is not None
    assert body["distance"] is None
