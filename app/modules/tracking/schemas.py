# app/modules/tracking/schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from app.modules.shipments.schemas import TrackingEventResponse

class PublicTrackingResponse(BaseModel):
    """What anyone holding a tracking number may see"""
    tracking_number: str
    status: str
    origin: str
    destination: str
    estimated_delivery: Optional[datetime] = None
    service_type: str
    receiver_name: str
    created_at: datetime
    delivered_at: Optional[datetime] = None
    events: List[TrackingEventResponse] = []

class ActiveShipmentResponse(BaseModel):
    id: UUID
    tracking_number: str
    status: str
    origin: str
    destination: str
    estimated_delivery: Optional[datetime] = None
    created_at: datetime
    driver_id: Optional[UUID] = None

    class Config:
        from_attributes = True

class LiveLocationResponse(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    last_updated: Optional[datetime] = None
    message: Optional[str] = None

class VehicleSummary(BaseModel):
    make: str
    model: str
    plate_number: str
    type: str

    class Config:
        from_attributes = True

class ShipmentDriverResponse(BaseModel):
    id: UUID
    name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    vehicle: Optional[VehicleSummary] = None

class ETAResponse(BaseModel):
    eta: Optional[datetime] = None
    status: str
    distance: Optional[float] = None
