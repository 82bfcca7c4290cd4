# app/modules/payments/router.py
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Header, Path, Request
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from .service import PaymentsService
from .schemas import (
    CheckoutSessionRequest, CheckoutSessionResponse, PaystackInitializeResponse,
    PaymentVerificationResponse, WebhookAck
)

router = APIRouter()

@router.get("/health")
async def payments_health():
    """Health check of the payments module"""
    return {
        "service": "payments",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Stripe Checkout",
            "Paystack transactions",
            "Signed webhooks",
            "Shipment payment confirmation"
        ]
    }

@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    data: CheckoutSessionRequest,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Open a Stripe Checkout session for a shipment

    Only the sender can pay. The amount is the shipping fee, or the default
    checkout amount when the shipment has no fee.
    """
    service = PaymentsService(db)
    return await service.create_checkout_session(data.shipment_id, current_user)

@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
    db: Session = Depends(get_db)
):
    """
    Stripe webhook

    The raw body is verified against the Stripe-Signature header. A completed
    checkout marks the payment succeeded and moves the shipment to processing.
    """
    payload = await request.body()
    service = PaymentsService(db)
    await service.handle_stripe_webhook(payload, stripe_signature)
    return WebhookAck()

@router.get("/initialize/{shipment_id}", response_model=PaystackInitializeResponse)
async def initialize_paystack_payment(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Start a Paystack transaction and return the authorization URL"""
    service = PaymentsService(db)
    return await service.initialize_paystack(shipment_id, current_user)

@router.get("/booking/verify/{shipment_id}", response_model=PaymentVerificationResponse)
async def verify_paystack_payment(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Verify the latest pending Paystack payment of a shipment

    **Results:** success, pending, failed
    """
    service = PaymentsService(db)
    return await service.verify_paystack(shipment_id, current_user)

@router.post("/paystack-webhook", response_model=WebhookAck)
async def paystack_webhook(
    request: Request,
    paystack_signature: Optional[str] = Header(None, alias="x-paystack-signature"),
    db: Session = Depends(get_db)
):
    """Paystack webhook, signed with HMAC-SHA512 of the raw body"""
    payload = await request.body()
    service = PaymentsService(db)
    await service.handle_paystack_webhook(payload, paystack_signature)
    return WebhookAck()
