# app/modules/payments/schemas.py
from pydantic import BaseModel, Field
from typing import Optional
from uuid import UUID

class CheckoutSessionRequest(BaseModel):
    shipment_id: UUID = Field(..., alias="shipmentId")

    class Config:
        populate_by_name = True

class CheckoutSessionResponse(BaseModel):
    url: str
    session_id: str

class PaystackInitializeResponse(BaseModel):
    authorization_url: str
    access_code: Optional[str] = None
    reference: str

class PaymentVerificationResponse(BaseModel):
    """status is one of success, pending, failed"""
    status: str
    message: str
    amount: Optional[float] = None

class WebhookAck(BaseModel):
    received: bool = True
