import logging
from datetime import timedelta

from app.core.auth.service import AuthService
from app.shared.database.models import AuthAuditLog, User
from conftest import PASSWORD, auth_headers

REGISTRATION = {
    "email": "Ngozi.Eze@blynelogistics.com",
    "password": "Cargo@2026",
    "firstName": "Ngozi",
    "lastName": "Eze",
    "phone": "+2348012345678",
}


def test_register_returns_token_and_user_role(client, db):
    response = client.post("/api/v1/auth/register", json=REGISTRATION)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Registration successful"
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "user"
    assert body["user"]["email"] == "ngozi.eze@blynelogistics.com"

    payload = AuthService.verify_token(body["access_token"])
    assert payload["email"] == "ngozi.eze@blynelogistics.com"
    assert payload["role"] == "user"


def test_register_duplicate_email(client, customer):
    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "email": customer.email})
    assert response.status_code == 400


def test_register_weak_password(client):
    response = client.post("/api/v1/auth/register", json={**REGISTRATION, "password": "password"})
    assert response.status_code == 422


def test_login(client, customer):
    response = client.post("/api/v1/auth/login", json={"email": customer.email, "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(customer.id)


def test_login_wrong_password(client, customer):
    response = client.post("/api/v1/auth/login", json={"email": customer.email, "password": "Wrong@123"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"


def test_login_inactive_user(client, db, customer):
    customer.is_active = False
    db.commit()
    response = client.post("/api/v1/auth/login", json={"email": customer.email, "password": PASSWORD})
    assert response.status_code == 403


def test_token_form_login(client, customer):
    response = client.post("/api/v1/auth/token", data={"username": customer.email, "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["access_token"]


def test_me(client, customer, customer_headers):
    response = client.get("/api/v1/auth/me", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["email"] == customer.email


def test_me_without_token(client):
    response = client.get("/api/v1/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "No valid authorization token provided"


def test_expired_token_rejected(client, customer):
    token = AuthService.create_access_token(
        {"user_id": str(customer.id), "email": customer.email, "role": customer.role},
        expires_delta=timedelta(minutes=-5)
    )
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_logout(client):
    assert client.post("/api/v1/auth/logout").json() == {"message": "Logged out successfully"}


def test_forgot_password_does_not_reveal_accounts(client, db, customer):
    known = client.post("/api/v1/auth/forgot-password", json={"email": customer.email})
    unknown = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@blynelogistics.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert db.query(AuthAuditLog).filter(AuthAuditLog.event_type == "password_reset_request").count() == 2


def test_reset_password(client, db, customer):
    token = AuthService.create_password_reset_token(str(customer.id), customer.email, customer.password_hash)

    response = client.post("/api/v1/auth/reset-password", json={"token": token, "newPassword": "Fresh@2026"})
    assert response.status_code == 200

    db.refresh(customer)
    assert AuthService.verify_password("Fresh@2026", customer.password_hash)
    login = client.post("/api/v1/auth/login", json={"email": customer.email, "password": "Fresh@2026"})
    assert login.status_code == 200


def test_reset_password_invalid_token(client, db):
    response = client.post("/api/v1/auth/reset-password", json={"token": "not-a-token", "newPassword": "Fresh@2026"})
    assert response.status_code == 400
    assert db.query(AuthAuditLog).filter(AuthAuditLog.event_type == "password_reset_failure").count() == 1


def test_access_token_cannot_reset_password(client, customer):
    access_token = auth_headers(customer)["Authorization"].split(" ")[1]
    response = client.post("/api/v1/auth/reset-password", json={"token": access_token, "newPassword": "Fresh@2026"})
    assert response.status_code == 400


def test_reset_token_works_only_once(client, db, customer):
    token = AuthService.create_password_reset_token(str(customer.id), customer.email, customer.password_hash)

    first = client.post("/api/v1/auth/reset-password", json={"token": token, "newPassword": "Fresh@2026"})
    assert first.status_code == 200

    second = client.post("/api/v1/auth/reset-password", json={"token": token, "newPassword": "Other@2026"})
    assert second.status_code == 400
    assert second.json()["detail"] == "Invalid or expired reset token"

    db.refresh(customer)
    assert AuthService.verify_password("Fresh@2026", customer.password_hash)


def test_forgot_password_logs_reset_link(client, customer, caplog):
    caplog.set_level(logging.INFO, logger="app.api.v1.auth")

    response = client.post("/api/v1/auth/forgot-password", json={"email": customer.email})
    assert response.status_code == 200
    assert "token" not in response.json()

    records = [r for r in caplog.records if "/reset-password?token=" in r.getMessage()]
    assert len(records) == 1
    assert records[0].levelno == logging.INFO

    token = records[0].getMessage().split("token=", 1)[1]
    reset = client.post("/api/v1/auth/reset-password", json={"token": token, "newPassword": "Fresh@2026"})
    assert reset.status_code == 200
