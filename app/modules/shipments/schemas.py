# app/modules/shipments/schemas.py
from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from uuid import UUID

from app.config.constants import (
    BOOKABLE_SERVICE_TYPES, DEFAULT_PACKAGE_TYPE, DEFAULT_SERVICE_TYPE, SHIPMENT_STATUSES
)
from app.shared.schemas.common import PaginatedResponse, PersonSummary

class AddressInput(BaseModel):
    """Structured address sent by the booking form"""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

def _check_service_type(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    normalized = value.lower().strip()
    if normalized not in BOOKABLE_SERVICE_TYPES:
        raise ValueError("Invalid service type. Must be: 5 tons, 10 tons, or 15 tons")
    return normalized

# ===== REQUESTS =====

class ShipmentCreate(BaseModel):
    origin: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    receiver_name: str = Field(..., min_length=1, alias="receiverName")
    receiver_email: Optional[str] = Field(None, alias="receiverEmail")
    receiver_phone: Optional[str] = Field(None, alias="receiverPhone")
    weight: float = Field(..., ge=0.1, description="Weight in kg")
    dimensions: Optional[Dict[str, Any]] = None
    service_type: Optional[str] = Field(DEFAULT_SERVICE_TYPE, alias="serviceType")
    package_type: Optional[str] = Field(DEFAULT_PACKAGE_TYPE, alias="packageType")
    description: Optional[str] = None
    declared_value: Optional[float] = Field(None, ge=0, alias="declaredValue")
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")

    @validator('origin', 'destination', 'receiver_name')
    def strip_required(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @validator('service_type')
    def check_service_type(cls, v):
        return _check_service_type(v) or DEFAULT_SERVICE_TYPE

    @validator('package_type')
    def lower_package_type(cls, v):
        return v.lower().strip() if v else DEFAULT_PACKAGE_TYPE

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "origin": "12 Marina Road, Lagos",
                "destination": "5 Ring Road, Ibadan",
                "receiverName": "Tunde Bello",
                "receiverPhone": "+2348098765432",
                "weight": 1200,
                "serviceType": "5 tons",
                "packageType": "general cargo"
            }
        }

class ShipmentUpdate(BaseModel):
    """
    Partial update; which fields are honoured depends on the caller's role
    """
    status: Optional[str] = None
    location: Optional[str] = None
    status_description: Optional[str] = Field(None, alias="statusDescription")
    receiver_name: Optional[str] = Field(None, alias="receiverName")
    receiver_email: Optional[str] = Field(None, alias="receiverEmail")
    receiver_phone: Optional[str] = Field(None, alias="receiverPhone")
    weight: Optional[float] = Field(None, ge=0.1)
    cargo_weight_kg: Optional[float] = Field(None, ge=0.1, alias="cargoWeightKg")
    origin: Optional[Union[str, AddressInput]] = None
    destination: Optional[Union[str, AddressInput]] = None
    service_type: Optional[str] = Field(None, alias="serviceType")
    package_type: Optional[str] = Field(None, alias="packageType")
    description: Optional[str] = None
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")
    notes: Optional[str] = None
    dimensions: Optional[Dict[str, Any]] = None
    declared_value: Optional[float] = Field(None, ge=0, alias="declaredValue")
    driver_id: Optional[UUID] = Field(None, alias="driverId")

    @validator('status')
    def check_status(cls, v):
        if v is not None and v not in SHIPMENT_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(SHIPMENT_STATUSES)}")
        return v

    @validator('service_type')
    def check_service_type(cls, v):
        return _check_service_type(v)

    @validator('package_type')
    def lower_package_type(cls, v):
        return v.lower().strip() if v else v

    class Config:
        populate_by_name = True

class ShipmentCancelRequest(BaseModel):
    reason: Optional[str] = None

# ===== RESPONSES =====

class TrackingEventResponse(BaseModel):
    id: UUID
    status: str
    location: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    description: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class DriverSummary(BaseModel):
    id: UUID
    status: Optional[str] = None
    profile: Optional[PersonSummary] = None

class ShipmentResponse(BaseModel):
    id: UUID
    tracking_number: str
    sender_id: Optional[UUID] = None
    driver_id: Optional[UUID] = None
    origin: str
    destination: str
    receiver_name: str
    receiver_email: Optional[str] = None
    receiver_phone: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    declared_value: Optional[float] = None
    special_instructions: Optional[str] = None
    service_type: str
    package_type: str
    status: str
    payment_status: str
    shipping_fee: Optional[float] = None
    estimated_delivery: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ShipmentListItem(ShipmentResponse):
    sender: Optional[PersonSummary] = None
    driver: Optional[DriverSummary] = None

class ShipmentDetailResponse(ShipmentListItem):
    tracking_events: List[TrackingEventResponse] = []

class ShipmentMutationResponse(BaseModel):
    message: str
    shipment: ShipmentResponse

class ShipmentListResponse(PaginatedResponse):
    shipments: List[ShipmentListItem]

class ShipmentStatsResponse(BaseModel):
    total: int = 0
    pending: int = 0
    in_transit: int = 0
    delivered: int = 0
    cancelled: int = 0

class UserShipmentStatsResponse(ShipmentStatsResponse):
    active: int = 0

class ShipmentDocumentResponse(BaseModel):
    id: UUID
    shipment_id: UUID
    name: str
    type: Optional[str] = None
    url: str
    created_at: datetime

    class Config:
        from_attributes = True
