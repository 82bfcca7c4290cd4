"""
Payments Module - Shipment payments through Stripe and Paystack

Features:
- Stripe Checkout sessions for shipment fees
- Paystack transaction initialization and verification
- Signature-checked webhooks for both providers
- Payment confirmation moves the shipment to processing with a tracking event

Architecture:
- router.py: Payment endpoints and webhooks
- service.py: Payment flows and confirmation
- repository.py: payments data access
- stripe_client.py: Stripe SDK wrapper
- schemas.py: Request/response models
"""

from .router import router
from .service import PaymentsService
from .repository import PaymentsRepository
from .stripe_client import stripe_client

__all__ = [
    "router",
    "PaymentsService",
    "PaymentsRepository",
    "stripe_client"
]
