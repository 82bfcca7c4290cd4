# app/modules/payments/stripe_client.py

"""
Stripe Checkout and webhook verification
"""

import json
import logging
from typing import Any, Dict, Optional

import stripe

from app.config.settings import settings

logger = logging.getLogger(__name__)


class StripeClient:
    """Thin wrapper over the Stripe SDK"""

    def __init__(self):
        self.secret_key = settings.stripe_secret_key
        self.webhook_secret = settings.stripe_webhook_secret
        self.currency = settings.stripe_currency

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def create_checkout_session(
        self,
        amount: int,
        product_name: str,
        product_description: str,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str]
    ) -> Any:
        """
        Card checkout for a single line item

        Args:
            amount: In the smallest currency unit (kobo for NGN)
        """
        logger.info(f"💳 Creating Stripe checkout session ({amount} {self.currency})")
        return stripe.checkout.Session.create(
            api_key=self.secret_key,
            payment_method_types=["card"],
            line_items=[{
                "price_data": {
                    "currency": self.currency,
                    "product_data": {
                        "name": product_name,
                        "description": product_description
                    },
                    "unit_amount": amount
                },
                "quantity": 1
            }],
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            metadata=metadata
        )

    def parse_webhook_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify the Stripe-Signature header and decode the event

        Raises:
            stripe.SignatureVerificationError: bad or stale signature
            ValueError: payload is not valid JSON
        """
        text = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(text, signature or "", self.webhook_secret)
        return json.loads(text)


stripe_client = StripeClient()
