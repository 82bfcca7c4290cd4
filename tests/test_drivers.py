from datetime import timedelta

from app.shared.database.models import Driver, Vehicle
from app.shared.utils.helpers import utcnow
from conftest import make_shipment, make_user


def test_create_driver_promotes_account(client, db, customer, vehicle, admin_headers):
    response = client.post(
        "/api/v1/drivers",
        json={"userId": str(customer.id), "licenseNumber": "LAG-DRV-777", "vehicleId": str(vehicle.id)},
        headers=admin_headers
    )
    assert response.status_code == 201
    driver = response.json()["driver"]
    assert driver["status"] == "active"
    assert driver["vehicle_id"] == str(vehicle.id)
    assert driver["profile"]["email"] == customer.email

    db.refresh(customer)
    db.refresh(vehicle)
    assert customer.role == "driver"
    assert vehicle.is_assigned is True
    assert str(vehicle.assigned_driver_id) == driver["id"]


def test_create_driver_conflicts(client, db, driver, driver_user, admin_headers):
    again = client.post(
        "/api/v1/drivers",
        json={"userId": str(driver_user.id), "licenseNumber": "LAG-DRV-999"},
        headers=admin_headers
    )
    assert again.status_code == 409
    assert again.json()["detail"] == "User is already registered as a driver"

    newcomer = make_user(db, "newdriver@blynelogistics.com")
    duplicate_license = client.post(
        "/api/v1/drivers",
        json={"userId": str(newcomer.id), "licenseNumber": "LAG-DRV-001"},
        headers=admin_headers
    )
    assert duplicate_license.status_code == 409


def test_driver_management_requires_admin(client, customer, customer_headers, driver_headers):
    payload = {"userId": str(customer.id), "licenseNumber": "LAG-DRV-555"}
    assert client.post("/api/v1/drivers", json=payload, headers=customer_headers).status_code == 403
    assert client.get("/api/v1/drivers", headers=driver_headers).status_code == 403


def test_suspend_and_reactivate(client, driver, admin_headers):
    suspended = client.post(
        f"/api/v1/drivers/{driver.id}/suspend",
        json={"reason": "Late deliveries"},
        headers=admin_headers
    ).json()["driver"]
    assert suspended["status"] == "suspended"
    assert suspended["suspension_reason"] == "Late deliveries"
    assert suspended["suspended_at"] is not None

    stats = client.get("/api/v1/drivers/stats", headers=admin_headers).json()
    assert stats["suspended"] == 1
    assert stats["total"] == 1

    reactivated = client.post(f"/api/v1/drivers/{driver.id}/reactivate", headers=admin_headers).json()["driver"]
    assert reactivated["status"] == "active"
    assert reactivated["suspension_reason"] is None


def test_verify_driver(client, driver, admin_headers):
    body = client.post(f"/api/v1/drivers/{driver.id}/verify", headers=admin_headers).json()
    assert body["message"] == "Driver verified successfully"
    assert body["driver"]["is_verified"] is True


def test_deactivate_driver(client, driver, admin_headers):
    response = client.delete(f"/api/v1/drivers/{driver.id}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/v1/drivers/{driver.id}", headers=admin_headers).json()["status"] == "inactive"


def test_reassigning_vehicle_frees_previous(client, db, driver, vehicle, admin_headers):
    second = Vehicle(make="Toyota", model="Hiace", plate_number="ABJ-100-XY", type="van")
    db.add(second)
    db.commit()

    client.post(f"/api/v1/drivers/{driver.id}/vehicle", json={"vehicleId": str(vehicle.id)}, headers=admin_headers)
    response = client.post(f"/api/v1/drivers/{driver.id}/vehicle", json={"vehicleId": str(second.id)}, headers=admin_headers)
    assert response.status_code == 200

    db.refresh(vehicle)
    db.refresh(second)
    assert vehicle.is_assigned is False
    assert vehicle.assigned_driver_id is None
    assert second.is_assigned is True

    available = client.get("/api/v1/vehicles/available", headers=admin_headers).json()
    assert [v["plate_number"] for v in available] == ["LAG-452-KJ"]


def test_vehicle_taken_by_another_driver(client, db, driver, vehicle, admin_headers):
    other_user = make_user(db, "second.driver@blynelogistics.com", role="driver")
    other = client.post(
        "/api/v1/drivers",
        json={"userId": str(other_user.id), "licenseNumber": "LAG-DRV-002", "vehicleId": str(vehicle.id)},
        headers=admin_headers
    )
    assert other.status_code == 201

    response = client.post(f"/api/v1/drivers/{driver.id}/vehicle", json={"vehicleId": str(vehicle.id)}, headers=admin_headers)
    assert response.status_code == 409


def test_driver_updates_own_location_only(client, db, driver, driver_headers):
    response = client.put(f"/api/v1/drivers/{driver.id}/location", json={"lat": 6.45, "lng": 3.39}, headers=driver_headers)
    assert response.status_code == 200
    assert response.json()["last_location_update"] is not None

    other_user = make_user(db, "second.driver@blynelogistics.com", role="driver")
    other = Driver(user_id=other_user.id, license_number="LAG-DRV-003")
    db.add(other)
    db.commit()

    forbidden = client.put(f"/api/v1/drivers/{other.id}/location", json={"lat": 6.45, "lng": 3.39}, headers=driver_headers)
    assert forbidden.status_code == 403


def test_location_out_of_range(client, driver, driver_headers):
    response = client.put(f"/api/v1/drivers/{driver.id}/location", json={"lat": 95, "lng": 3.39}, headers=driver_headers)
    assert response.status_code == 422


def test_route_without_active_route(client, driver, driver_headers):
    body = client.get(f"/api/v1/drivers/{driver.id}/route", headers=driver_headers).json()
    assert body == {"route": None, "message": "No active route"}


def test_performance(client, db, customer, driver, driver_headers):
    now = utcnow()
    make_shipment(
        db, customer, driver_id=driver.id, status="delivered",
        created_at=now - timedelta(days=4), estimated_delivery=now - timedelta(days=1),
        delivered_at=now - timedelta(days=2)
    )
    make_shipment(
        db, customer, driver_id=driver.id, status="delivered",
        created_at=now - timedelta(days=4), estimated_delivery=now - timedelta(days=3),
        delivered_at=now - timedelta(days=2)
    )
    make_shipment(db, customer, driver_id=driver.id, status="in_transit")

    body = client.get(f"/api/v1/drivers/{driver.id}/performance", headers=driver_headers).json()
    assert body["total_deliveries"] == 2
    assert body["on_time_deliveries"] == 1
    assert body["on_time_rate"] == 50.0
    assert body["average_delivery_days"] == 2.0
    assert body["rating"] == 5.0


def test_vehicle_registry(client, vehicle, admin_headers, customer_headers):
    payload = {"make": "Isuzu", "model": "FVR", "plateNumber": " lag-452-kj ", "type": "Truck"}
    duplicate = client.post("/api/v1/vehicles", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409

    created = client.post("/api/v1/vehicles", json={**payload, "plateNumber": "KAN-900-AA"}, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["type"] == "truck"

    assert client.get("/api/v1/vehicles", headers=customer_headers).status_code == 403
    assert len(client.get("/api/v1/vehicles", headers=admin_headers).json()) == 2
