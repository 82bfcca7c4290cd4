# app/modules/payments/service.py
from typing import Any, Dict, Optional
from uuid import UUID
import json
import logging
import time

import stripe
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.config.constants import DEFAULT_CHECKOUT_AMOUNT, PaymentStatus, ShipmentPaymentStatus
from app.config.settings import settings
from app.core.auth.dependencies import is_admin
from app.shared.database.models import Payment, Shipment, User
from app.shared.services.paystack_client import paystack_client
from app.shared.services.shipment_events import ShipmentEventService, PAYMENT_VERIFIED_DESCRIPTION
from .repository import PaymentsRepository
from .stripe_client import stripe_client
from .schemas import (
    CheckoutSessionResponse, PaystackInitializeResponse, PaymentVerificationResponse
)

logger = logging.getLogger(__name__)

PAYSTACK_WEBHOOK_DESCRIPTION = "Payment verified via webhook. Shipment moved to processing."

def charge_amount(shipment: Shipment) -> float:
    """Amount due in major units; shipments without a fee use the default"""
    return float(shipment.shipping_fee or DEFAULT_CHECKOUT_AMOUNT)

def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))

class PaymentsService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = PaymentsRepository(db)

    def _get_payable_shipment(self, shipment_id: UUID, current_user: User) -> Shipment:
        shipment = self.repository.get_shipment(shipment_id)
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        if shipment.sender_id != current_user.id:
            raise HTTPException(status_code=403, detail="You can only pay for your own shipments")
        if shipment.payment_status == ShipmentPaymentStatus.PAID.value:
            raise HTTPException(status_code=400, detail="This shipment has already been paid")
        return shipment

    # ===== STRIPE =====

    async def create_checkout_session(self, shipment_id: UUID, current_user: User) -> CheckoutSessionResponse:
        if not stripe_client.configured:
            raise HTTPException(status_code=503, detail="Stripe is not configured")

        shipment = self._get_payable_shipment(shipment_id, current_user)
        amount = charge_amount(shipment)
        frontend = settings.frontend_base_url

        try:
            session = stripe_client.create_checkout_session(
                amount=to_minor_units(amount),
                product_name=f"Shipment Tracking: {shipment.tracking_number}",
                product_description=f"Shipping from {shipment.origin} to {shipment.destination}",
                success_url=f"{frontend}/user/shipments?payment=success&id={shipment.id}",
                cancel_url=f"{frontend}/user/shipments?payment=cancelled",
                metadata={"shipmentId": str(shipment.id), "userId": str(current_user.id)}
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe checkout failed for {shipment.tracking_number}: {str(e)}")
            raise HTTPException(status_code=502, detail="Could not create the checkout session")

        self.repository.create({
            "shipment_id": shipment.id,
            "amount": amount,
            "currency": settings.stripe_currency.upper(),
            "provider": "stripe",
            "status": PaymentStatus.PENDING.value,
            "stripe_session_id": session.id
        })

        logger.info(f"💳 Checkout session {session.id} created for {shipment.tracking_number}")
        return CheckoutSessionResponse(url=session.url, session_id=session.id)

    async def handle_stripe_webhook(self, payload: bytes, signature: Optional[str]) -> None:
        if not stripe_client.webhook_secret:
            raise HTTPException(status_code=503, detail="Stripe webhooks are not configured")

        try:
            event = stripe_client.parse_webhook_event(payload, signature)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"⚠️ Stripe webhook signature verification failed: {str(e)}")
            raise HTTPException(status_code=400, detail=f"Webhook Error: {str(e)}")
        except ValueError as e:
            logger.warning(f"⚠️ Stripe webhook payload invalid: {str(e)}")
            raise HTTPException(status_code=400, detail="Webhook Error: invalid payload")

        event_type = event.get("type")
        logger.info(f"📨 Stripe webhook received: {event_type}")
        if event_type != "checkout.session.completed":
            return

        session = event.get("data", {}).get("object", {})
        payment = self.repository.get_by_session_id(session.get("id"))

        if payment is None:
            payment = self._payment_from_metadata(
                (session.get("metadata") or {}).get("shipmentId"),
                provider="stripe",
                amount=(session.get("amount_total") or 0) / 100,
                stripe_session_id=session.get("id")
            )
            if payment is None:
                return

        ShipmentEventService.mark_payment_succeeded(
            self.db,
            payment,
            description=PAYMENT_VERIFIED_DESCRIPTION,
            payment_intent_id=session.get("payment_intent")
        )

    def _payment_from_metadata(self, shipment_id: Optional[str], provider: str, amount: float, **fields) -> Optional[Payment]:
        """Payment row for a provider notification we never saw initialized"""
        shipment = None
        if shipment_id:
            try:
                shipment = self.repository.get_shipment(UUID(str(shipment_id)))
            except ValueError:
                shipment = None

        if shipment is None:
            logger.warning(f"⚠️ {provider} notification for unknown shipment {shipment_id}, ignored")
            return None

        logger.info(f"ℹ️ Recording {provider} payment for {shipment.tracking_number} from webhook metadata")
        return self.repository.create({
            "shipment_id": shipment.id,
            "amount": amount or charge_amount(shipment),
            "provider": provider,
            "status": PaymentStatus.PENDING.value,
            **fields
        })

    # ===== PAYSTACK =====

    async def initialize_paystack(self, shipment_id: UUID, current_user: User) -> PaystackInitializeResponse:
        if not paystack_client.configured:
            raise HTTPException(status_code=503, detail="Paystack is not configured")

        shipment = self._get_payable_shipment(shipment_id, current_user)
        amount = charge_amount(shipment)
        reference = f"DARA-{shipment.tracking_number}-{int(time.time() * 1000)}"

        response = await paystack_client.initialize_transaction(
            email=shipment.sender.email if shipment.sender else current_user.email,
            amount=to_minor_units(amount),
            reference=reference,
            callback_url=f"{settings.frontend_base_url}/user/payment/callback",
            metadata={
                "shipment_id": str(shipment.id),
                "tracking_number": shipment.tracking_number,
                "user_id": str(current_user.id)
            }
        )
        if not response.get("status"):
            raise HTTPException(status_code=400, detail=response.get("message") or "Failed to initialize payment")

        data = response.get("data") or {}
        self.repository.create({
            "shipment_id": shipment.id,
            "amount": amount,
            "currency": "NGN",
            "provider": "paystack",
            "status": PaymentStatus.PENDING.value,
            "reference": reference
        })

        return PaystackInitializeResponse(
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
            reference=data.get("reference") or reference
        )

    async def verify_paystack(self, shipment_id: UUID, current_user: User) -> PaymentVerificationResponse:
        shipment = self.repository.get_shipment(shipment_id)
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        if shipment.sender_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail="You can only verify payments of your own shipments")

        payment = self.repository.get_latest_pending(shipment.id, "paystack")
        if payment is None:
            paid = self.repository.get_succeeded(shipment.id)
            if paid:
                return PaymentVerificationResponse(
                    status="success", message="Payment already verified", amount=float(paid.amount)
                )
            raise HTTPException(status_code=404, detail="No pending payment found for this shipment")

        response = await paystack_client.verify_transaction(payment.reference)
        if not response.get("status"):
            raise HTTPException(status_code=400, detail=response.get("message") or "Failed to verify payment")

        transaction: Dict[str, Any] = response.get("data") or {}
        transaction_status = transaction.get("status")

        if transaction_status == "success":
            payment.paystack_reference = transaction.get("reference")
            ShipmentEventService.mark_payment_succeeded(self.db, payment)
            return PaymentVerificationResponse(
                status="success",
                message=PAYMENT_VERIFIED_DESCRIPTION,
                amount=(transaction.get("amount") or 0) / 100
            )

        if transaction_status == "pending":
            return PaymentVerificationResponse(status="pending", message="Payment is still being processed")

        self.repository.mark_failed(payment)
        logger.warning(f"⚠️ Paystack payment {payment.reference} ended as {transaction_status}")
        return PaymentVerificationResponse(status="failed", message="Payment verification failed")

    async def handle_paystack_webhook(self, payload: bytes, signature: Optional[str]) -> None:
        if not paystack_client.configured:
            raise HTTPException(status_code=503, detail="Paystack is not configured")

        if not paystack_client.verify_webhook_signature(payload, signature):
            logger.warning("⚠️ Paystack webhook with invalid signature rejected")
            raise HTTPException(status_code=401, detail="Invalid signature")

        try:
            event = json.loads(payload)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid payload")

        logger.info(f"📨 Paystack webhook received: {event.get('event')}")
        if event.get("event") != "charge.success":
            return

        data = event.get("data") or {}
        reference = data.get("reference")
        shipment_id = (data.get("metadata") or {}).get("shipment_id")
        if not shipment_id:
            return

        payment = self.repository.get_by_reference(reference) if reference else None
        if payment is None:
            payment = self._payment_from_metadata(
                shipment_id,
                provider="paystack",
                amount=(data.get("amount") or 0) / 100,
                reference=reference
            )
            if payment is None:
                return

        payment.paystack_reference = reference
        ShipmentEventService.mark_payment_succeeded(
            self.db, payment, description=PAYSTACK_WEBHOOK_DESCRIPTION
        )
