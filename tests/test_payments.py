import hashlib
import hmac
import json
import time
from types import SimpleNamespace

import pytest

from app.modules.payments.stripe_client import stripe_client
from app.shared.database.models import Notification, Payment, TrackingEvent
from app.shared.services.paystack_client import paystack_client
from conftest import make_shipment

STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
PAYSTACK_SECRET = "sk_test_paystack"


@pytest.fixture
def stripe_configured(monkeypatch):
    monkeypatch.setattr(stripe_client, "secret_key", "sk_test_stripe")
    monkeypatch.setattr(stripe_client, "webhook_secret", STRIPE_WEBHOOK_SECRET)


@pytest.fixture
def paystack_configured(monkeypatch):
    monkeypatch.setattr(paystack_client, "secret_key", PAYSTACK_SECRET)


def stripe_signature(payload: str, secret: str = STRIPE_WEBHOOK_SECRET) -> str:
    timestamp = int(time.time())
    digest = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def paystack_signature(payload: str) -> str:
    return hmac.new(PAYSTACK_SECRET.encode(), payload.encode(), hashlib.sha512).hexdigest()


def completed_session_event(shipment, session_id="cs_test_123"):
    return json.dumps({
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {"object": {
            "id": session_id,
            "amount_total": 5000000,
            "payment_intent": "pi_test_123",
            "metadata": {"shipmentId": str(shipment.id)}
        }}
    })


def events_for(db, shipment):
    return db.query(TrackingEvent).filter(TrackingEvent.shipment_id == shipment.id).all()


# ===== STRIPE =====

def test_checkout_session_records_pending_payment(client, db, customer, customer_headers, stripe_configured, monkeypatch):
    shipment = make_shipment(db, customer)
    captured = {}

    def fake_create(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(id="cs_test_123", url="https://checkout.stripe.com/c/pay/cs_test_123")

    monkeypatch.setattr(stripe_client, "create_checkout_session", fake_create)

    response = client.post(
        "/api/v1/payments/create-checkout-session",
        json={"shipmentId": str(shipment.id)},
        headers=customer_headers
    )
    assert response.status_code == 200
    assert response.json()["url"].startswith("https://checkout.stripe.com")
    assert captured["amount"] == 5000000
    assert captured["metadata"]["shipmentId"] == str(shipment.id)

    payment = db.query(Payment).one()
    assert payment.status == "pending"
    assert payment.stripe_session_id == "cs_test_123"


def test_checkout_session_without_stripe(client, db, customer, customer_headers, monkeypatch):
    monkeypatch.setattr(stripe_client, "secret_key", "")
    shipment = make_shipment(db, customer)
    response = client.post(
        "/api/v1/payments/create-checkout-session",
        json={"shipmentId": str(shipment.id)},
        headers=customer_headers
    )
    assert response.status_code == 503


def test_checkout_rejects_paid_and_foreign_shipments(client, db, customer, other_headers, customer_headers, stripe_configured):
    paid = make_shipment(db, customer, payment_status="paid", status="processing")
    response = client.post(
        "/api/v1/payments/create-checkout-session",
        json={"shipmentId": str(paid.id)},
        headers=customer_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "This shipment has already been paid"

    unpaid = make_shipment(db, customer)
    response = client.post(
        "/api/v1/payments/create-checkout-session",
        json={"shipmentId": str(unpaid.id)},
        headers=other_headers
    )
    assert response.status_code == 403


def test_stripe_webhook_cascades_once(client, db, customer, stripe_configured):
    shipment = make_shipment(db, customer)
    db.add(Payment(shipment_id=shipment.id, amount=50000, provider="stripe", status="pending", stripe_session_id="cs_test_123"))
    db.commit()

    payload = completed_session_event(shipment)
    headers = {"stripe-signature": stripe_signature(payload), "content-type": "application/json"}

    first = client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    assert first.status_code == 200
    assert first.json() == {"received": True}

    # Provider retries deliver the same event again
    second = client.post("/api/v1/payments/webhook", content=payload, headers=headers)
    assert second.status_code == 200

    db.refresh(shipment)
    payment = db.query(Payment).one()
    assert payment.status == "succeeded"
    assert payment.stripe_payment_intent_id == "pi_test_123"
    assert shipment.payment_status == "paid"
    assert shipment.status == "processing"

    events = events_for(db, shipment)
    assert len(events) == 1
    assert events[0].status == "processing"
    assert events[0].location == "System"
    assert db.query(Notification).filter(Notification.user_id == customer.id).count() == 1


def test_stripe_webhook_without_payment_row(client, db, customer, stripe_configured):
    shipment = make_shipment(db, customer)
    payload = completed_session_event(shipment, session_id="cs_unknown")

    response = client.post("/api/v1/payments/webhook", content=payload, headers={"stripe-signature": stripe_signature(payload)})
    assert response.status_code == 200

    payment = db.query(Payment).one()
    assert payment.status == "succeeded"
    assert float(payment.amount) == 50000
    db.refresh(shipment)
    assert shipment.payment_status == "paid"


def test_stripe_webhook_bad_signature(client, db, customer, stripe_configured):
    shipment = make_shipment(db, customer)
    payload = completed_session_event(shipment)

    response = client.post(
        "/api/v1/payments/webhook",
        content=payload,
        headers={"stripe-signature": stripe_signature(payload, secret="whsec_wrong")}
    )
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Webhook Error")
    assert events_for(db, shipment) == []


def test_stripe_webhook_ignores_other_events(client, db, stripe_configured):
    payload = json.dumps({"id": "evt_2", "type": "payment_intent.created", "data": {"object": {}}})
    response = client.post("/api/v1/payments/webhook", content=payload, headers={"stripe-signature": stripe_signature(payload)})
    assert response.status_code == 200
    assert db.query(Payment).count() == 0


# ===== PAYSTACK =====

def test_paystack_initialize(client, db, customer, customer_headers, paystack_configured, monkeypatch):
    shipment = make_shipment(db, customer)
    captured = {}

    async def fake_initialize(**kwargs):
        captured.update(kwargs)
        return {
            "status": True,
            "message": "Authorization URL created",
            "data": {
                "authorization_url": "https://checkout.paystack.com/abc",
                "access_code": "abc",
                "reference": kwargs["reference"]
            }
        }

    monkeypatch.setattr(paystack_client, "initialize_transaction", fake_initialize)

    response = client.get(f"/api/v1/payments/initialize/{shipment.id}", headers=customer_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["authorization_url"] == "https://checkout.paystack.com/abc"
    assert body["reference"].startswith(f"DARA-{shipment.tracking_number}-")
    assert captured["amount"] == 5000000
    assert captured["metadata"]["shipment_id"] == str(shipment.id)
    assert captured["callback_url"].endswith("/user/payment/callback")

    payment = db.query(Payment).one()
    assert payment.provider == "paystack"
    assert payment.currency == "NGN"
    assert payment.reference == body["reference"]


def test_paystack_initialize_rejected_by_provider(client, db, customer, customer_headers, paystack_configured, monkeypatch):
    shipment = make_shipment(db, customer)

    async def fake_initialize(**kwargs):
        return {"status": False, "message": "Invalid email address"}

    monkeypatch.setattr(paystack_client, "initialize_transaction", fake_initialize)

    response = client.get(f"/api/v1/payments/initialize/{shipment.id}", headers=customer_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid email address"
    assert db.query(Payment).count() == 0


def test_paystack_verify_success(client, db, customer, customer_headers, paystack_configured, monkeypatch):
    shipment = make_shipment(db, customer)
    db.add(Payment(shipment_id=shipment.id, amount=50000, provider="paystack", status="pending", reference="DARA-ref-1"))
    db.commit()

    async def fake_verify(reference):
        return {"status": True, "data": {"status": "success", "reference": reference, "amount": 5000000}}

    monkeypatch.setattr(paystack_client, "verify_transaction", fake_verify)

    response = client.get(f"/api/v1/payments/booking/verify/{shipment.id}", headers=customer_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "success"
    assert response.json()["amount"] == 50000

    db.refresh(shipment)
    assert shipment.status == "processing"
    assert shipment.payment_status == "paid"
    assert len(events_for(db, shipment)) == 1

    again = client.get(f"/api/v1/payments/booking/verify/{shipment.id}", headers=customer_headers)
    assert again.json()["message"] == "Payment already verified"
    assert len(events_for(db, shipment)) == 1


def test_paystack_verify_failed_transaction(client, db, customer, customer_headers, paystack_configured, monkeypatch):
    shipment = make_shipment(db, customer)
    db.add(Payment(shipment_id=shipment.id, amount=50000, provider="paystack", status="pending", reference="DARA-ref-2"))
    db.commit()

    async def fake_verify(reference):
        return {"status": True, "data": {"status": "abandoned", "reference": reference}}

    monkeypatch.setattr(paystack_client, "verify_transaction", fake_verify)

    response = client.get(f"/api/v1/payments/booking/verify/{shipment.id}", headers=customer_headers)
    assert response.json()["status"] == "failed"
    assert db.query(Payment).one().status == "failed"
    db.refresh(shipment)
    assert shipment.payment_status == "unpaid"


def test_paystack_verify_without_payment(client, db, customer, customer_headers):
    shipment = make_shipment(db, customer)
    response = client.get(f"/api/v1/payments/booking/verify/{shipment.id}", headers=customer_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "No pending payment found for this shipment"


def test_paystack_webhook_cascades(client, db, customer, paystack_configured):
    shipment = make_shipment(db, customer)
    db.add(Payment(shipment_id=shipment.id, amount=50000, provider="paystack", status="pending", reference="DARA-ref-3"))
    db.commit()

    payload = json.dumps({
        "event": "charge.success",
        "data": {"reference": "DARA-ref-3", "amount": 5000000, "metadata": {"shipment_id": str(shipment.id)}}
    })
    headers = {"x-paystack-signature": paystack_signature(payload)}

    assert client.post("/api/v1/payments/paystack-webhook", content=payload, headers=headers).status_code == 200
    assert client.post("/api/v1/payments/paystack-webhook", content=payload, headers=headers).status_code == 200

    db.refresh(shipment)
    assert shipment.status == "processing"
    events = events_for(db, shipment)
    assert len(events) == 1
    assert events[0].description == "Payment verified via webhook. Shipment moved to processing."
    assert db.query(Payment).one().paystack_reference == "DARA-ref-3"


def test_paystack_webhook_invalid_signature(client, db, customer, paystack_configured):
    shipment = make_shipment(db, customer)
    payload = json.dumps({"event": "charge.success", "data": {"metadata": {"shipment_id": str(shipment.id)}}})

    response = client.post("/api/v1/payments/paystack-webhook", content=payload, headers={"x-paystack-signature": "bad"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid signature"
    assert events_for(db, shipment) == []
