# app/shared/services/paystack_client.py
import hashlib
import hmac
import httpx
import logging
from typing import Dict, Any, Optional
from fastapi import HTTPException
from app.config.settings import settings

logger = logging.getLogger(__name__)

class PaystackClient:
    """Client for the Paystack transaction API"""

    def __init__(self):
        self.base_url = settings.paystack_base_url.rstrip("/")
        self.secret_key = settings.paystack_secret_key
        self.timeout = settings.paystack_timeout

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json"
        }

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Call Paystack and return its JSON envelope ({status, message, data})

        Paystack reports business errors as status=false with a message, so
        non-2xx answers with a JSON body are returned to the caller as-is.
        """
        if not self.configured:
            raise HTTPException(status_code=503, detail="Paystack is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{endpoint}",
                    json=payload,
                    headers=self._get_headers()
                )
        except httpx.TimeoutException:
            logger.error(f"⏱️ Paystack timeout on {endpoint}")
            raise HTTPException(status_code=504, detail="Payment provider timeout")
        except httpx.HTTPError as e:
            logger.error(f"❌ Error reaching Paystack on {endpoint}: {str(e)}")
            raise HTTPException(status_code=502, detail="Payment provider unavailable")

        try:
            body = response.json()
        except ValueError:
            logger.error(f"❌ Paystack returned non-JSON ({response.status_code}): {response.text[:200]}")
            raise HTTPException(status_code=502, detail="Invalid response from payment provider")

        if not body.get("status"):
            logger.warning(f"⚠️ Paystack {endpoint} failed ({response.status_code}): {body.get('message')}")
        return body

    async def initialize_transaction(
        self,
        email: str,
        amount: int,
        reference: str,
        callback_url: str,
        metadata: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Start a transaction

        Args:
            amount: In kobo (smallest currency unit)
        """
        logger.info(f"💳 Initializing Paystack transaction {reference}")
        return await self._request("POST", "/transaction/initialize", {
            "email": email,
            "amount": amount,
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata
        })

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        logger.info(f"🔍 Verifying Paystack transaction {reference}")
        return await self._request("GET", f"/transaction/verify/{reference}")

    def verify_webhook_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        """x-paystack-signature is the hex HMAC-SHA512 of the raw body"""
        if not self.configured or not signature:
            return False
        expected = hmac.new(self.secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
        return hmac.compare_digest(expected, signature)

paystack_client = PaystackClient()
