from datetime import timedelta

from app.shared.database.models import Notification, Shipment, TrackingEvent
from app.shared.utils.helpers import utcnow
from conftest import make_shipment

BOOKING = {
    "origin": "12 Marina Road, Lagos",
    "destination": "5 Ring Road, Ibadan",
    "receiverName": "Tunde Bello",
    "weight": 100,
    "serviceType": "5 tons",
}


def events_for(db, shipment_id):
    return db.query(TrackingEvent).filter(TrackingEvent.shipment_id == shipment_id).all()


def test_create_shipment_quotes_fee_and_eta(client, db, customer, customer_headers):
    before = utcnow()
    response = client.post("/api/v1/shipments", json=BOOKING, headers=customer_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Shipment created successfully"
    shipment = body["shipment"]
    assert shipment["tracking_number"].startswith("BLY-")
    assert shipment["status"] == "pending"
    assert shipment["payment_status"] == "unpaid"
    assert shipment["sender_id"] == str(customer.id)
    # 45000 base + 50 per kg, no distance at booking
    assert shipment["shipping_fee"] == 50000

    stored = db.query(Shipment).one()
    assert before + timedelta(days=5) - timedelta(seconds=5) <= stored.estimated_delivery
    assert stored.estimated_delivery <= utcnow() + timedelta(days=5)

    events = events_for(db, stored.id)
    assert len(events) == 1
    assert events[0].status == "pending"
    assert events[0].description == "Shipment created and pending pickup"


def test_create_shipment_stores_fee_to_the_cent(client, customer_headers):
    response = client.post("/api/v1/shipments", json={**BOOKING, "weight": 100.555}, headers=customer_headers)

    assert response.status_code == 201
    assert response.json()["shipment"]["shipping_fee"] == 50027.75


def test_create_shipment_rejects_unknown_service_type(client, customer_headers):
    response = client.post("/api/v1/shipments", json={**BOOKING, "serviceType": "2 tons"}, headers=customer_headers)
    assert response.status_code == 422


def test_create_shipment_requires_auth(client):
    response = client.post("/api/v1/shipments", json=BOOKING)
    assert response.status_code == 401


def test_list_visibility_by_role(client, db, customer, other_customer, customer_headers, admin_headers):
    make_shipment(db, customer)
    make_shipment(db, other_customer)

    own = client.get("/api/v1/shipments", headers=customer_headers).json()
    assert own["total"] == 1
    assert own["shipments"][0]["sender_id"] == str(customer.id)

    everything = client.get("/api/v1/shipments", headers=admin_headers).json()
    assert everything["total"] == 2


def test_get_shipment_forbidden_for_other_user(client, db, customer, other_headers):
    shipment = make_shipment(db, customer)
    response = client.get(f"/api/v1/shipments/{shipment.id}", headers=other_headers)
    assert response.status_code == 403


def test_user_update_rules(client, db, customer, customer_headers, driver):
    shipment = make_shipment(db, customer)

    response = client.put(f"/api/v1/shipments/{shipment.id}", json={"status": "in_transit"}, headers=customer_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Only staff can change the shipment status"

    response = client.put(f"/api/v1/shipments/{shipment.id}", json={"driverId": str(driver.id)}, headers=customer_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Only administrators can assign drivers"

    response = client.put(
        f"/api/v1/shipments/{shipment.id}",
        json={"destination": {"address": "3 Dugbe Road", "city": "Ibadan", "state": "Oyo"}, "weight": 200},
        headers=customer_headers
    )
    assert response.status_code == 200
    updated = response.json()["shipment"]
    assert updated["destination"] == "3 Dugbe Road, Ibadan, Oyo"
    assert updated["shipping_fee"] == 45000 + 50 * 200


def test_user_cannot_modify_non_pending(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer, status="processing")
    response = client.put(f"/api/v1/shipments/{shipment.id}", json={"receiverName": "Ngozi"}, headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Only pending shipments can be modified by users"


def test_admin_status_change_appends_event_and_notifies(client, db, customer, admin_headers, driver):
    shipment = make_shipment(db, customer, status="processing", payment_status="paid")

    response = client.put(
        f"/api/v1/shipments/{shipment.id}",
        json={"status": "in_transit", "driverId": str(driver.id)},
        headers=admin_headers
    )
    assert response.status_code == 200
    body = response.json()["shipment"]
    assert body["status"] == "in_transit"
    assert body["driver_id"] == str(driver.id)
    assert body["picked_up_at"] is not None

    events = events_for(db, shipment.id)
    assert [e.description for e in events] == ["Status updated to in_transit"]
    assert db.query(Notification).filter(Notification.user_id == customer.id).count() == 1


def test_same_status_does_not_append_event(client, db, customer, admin_headers):
    shipment = make_shipment(db, customer, status="processing")
    response = client.put(f"/api/v1/shipments/{shipment.id}", json={"status": "processing"}, headers=admin_headers)
    assert response.status_code == 200
    assert events_for(db, shipment.id) == []


def test_driver_updates_only_assigned_status(client, db, customer, driver, driver_headers):
    assigned = make_shipment(db, customer, status="in_transit", driver_id=driver.id)
    unassigned = make_shipment(db, customer, status="in_transit")

    response = client.put(f"/api/v1/shipments/{unassigned.id}", json={"status": "delivered"}, headers=driver_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only update shipments assigned to you"

    response = client.put(f"/api/v1/shipments/{assigned.id}", json={"weight": 5}, headers=driver_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Drivers can only update the shipment status"

    response = client.put(
        f"/api/v1/shipments/{assigned.id}",
        json={"status": "delivered", "location": "Ibadan depot"},
        headers=driver_headers
    )
    assert response.status_code == 200
    assert response.json()["shipment"]["delivered_at"] is not None

    events = events_for(db, assigned.id)
    assert len(events) == 1
    assert events[0].location == "Ibadan depot"


def test_delete_only_pending(client, db, customer, customer_headers):
    processing = make_shipment(db, customer, status="processing")
    response = client.delete(f"/api/v1/shipments/{processing.id}", headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Only pending shipments can be deleted"

    pending = make_shipment(db, customer)
    response = client.delete(f"/api/v1/shipments/{pending.id}", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Shipment deleted successfully"
    assert db.query(Shipment).filter(Shipment.id == pending.id).first() is None


def test_delete_forbidden_for_driver(client, db, customer, driver_headers):
    shipment = make_shipment(db, customer)
    response = client.delete(f"/api/v1/shipments/{shipment.id}", headers=driver_headers)
    assert response.status_code == 403


def test_cancel_records_reason(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer)

    response = client.post(
        f"/api/v1/shipments/{shipment.id}/cancel",
        json={"reason": "Booked twice"},
        headers=customer_headers
    )
    assert response.status_code == 200
    assert response.json()["shipment"]["status"] == "cancelled"
    assert response.json()["shipment"]["cancellation_reason"] == "Booked twice"
    assert events_for(db, shipment.id)[0].description == "Shipment cancelled: Booked twice"

    again = client.post(f"/api/v1/shipments/{shipment.id}/cancel", headers=customer_headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "This shipment cannot be cancelled"


def test_cancel_without_reason(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer, status="processing")
    response = client.post(f"/api/v1/shipments/{shipment.id}/cancel", headers=customer_headers)
    assert response.status_code == 200
    assert events_for(db, shipment.id)[0].description == "Shipment cancelled: No reason provided"


def test_public_stats(client, db, customer):
    make_shipment(db, customer)
    make_shipment(db, customer, status="in_transit")
    make_shipment(db, customer, status="delivered")

    response = client.get("/api/v1/shipments/stats")
    assert response.status_code == 200
    assert response.json() == {"total": 3, "pending": 1, "in_transit": 1, "delivered": 1, "cancelled": 0}


def test_user_shipment_stats(client, db, customer, customer_headers, other_headers):
    make_shipment(db, customer)
    make_shipment(db, customer, status="in_transit")

    response = client.get(f"/api/v1/users/{customer.id}/shipment-stats", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["active"] == 2

    forbidden = client.get(f"/api/v1/users/{customer.id}/shipment-stats", headers=other_headers)
    assert forbidden.status_code == 403
