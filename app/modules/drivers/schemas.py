# app/modules/drivers/schemas.py
from pydantic import BaseModel, Field, validator
from typing import Any, List, Optional
from datetime import date, datetime
from uuid import UUID

from app.config.constants import DRIVER_STATUSES, VEHICLE_TYPES
from app.shared.schemas.common import PaginatedResponse, PersonSummary

# ===== VEHICLES =====

class VehicleCreate(BaseModel):
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1950, le=2100)
    plate_number: str = Field(..., min_length=1, alias="plateNumber")
    type: str = "van"
    capacity_kg: Optional[float] = Field(None, ge=0, alias="capacityKg")

    @validator('type')
    def check_type(cls, v):
        v = v.lower().strip()
        if v not in VEHICLE_TYPES:
            raise ValueError(f"Invalid vehicle type. Must be one of: {', '.join(VEHICLE_TYPES)}")
        return v

    @validator('plate_number')
    def normalize_plate(cls, v):
        return v.strip().upper()

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {"make": "Isuzu", "model": "NPR", "year": 2021, "plateNumber": "LAG-452-KJ", "type": "truck", "capacityKg": 5000}
        }

class VehicleResponse(BaseModel):
    id: UUID
    make: str
    model: str
    year: Optional[int] = None
    plate_number: str
    type: str
    capacity_kg: Optional[float] = None
    is_active: bool
    is_assigned: bool
    assigned_driver_id: Optional[UUID] = None
    last_maintenance: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

# ===== DRIVERS =====

def _check_driver_status(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in DRIVER_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {', '.join(DRIVER_STATUSES)}")
    return value

class DriverCreate(BaseModel):
    user_id: UUID = Field(..., alias="userId")
    license_number: str = Field(..., min_length=1, alias="licenseNumber")
    license_expiry: Optional[date] = Field(None, alias="licenseExpiry")
    vehicle_id: Optional[UUID] = Field(None, alias="vehicleId")

    class Config:
        populate_by_name = True

class DriverUpdate(BaseModel):
    license_number: Optional[str] = Field(None, min_length=1, alias="licenseNumber")
    license_expiry: Optional[date] = Field(None, alias="licenseExpiry")
    status: Optional[str] = None
    vehicle_id: Optional[UUID] = Field(None, alias="vehicleId")

    @validator('status')
    def check_status(cls, v):
        return _check_driver_status(v)

    class Config:
        populate_by_name = True

class DriverSuspendRequest(BaseModel):
    reason: Optional[str] = None

class AssignVehicleRequest(BaseModel):
    vehicle_id: UUID = Field(..., alias="vehicleId")

    class Config:
        populate_by_name = True

class DriverLocationUpdate(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

class DriverProfileSummary(PersonSummary):
    avatar_url: Optional[str] = None

class DriverResponse(BaseModel):
    id: UUID
    user_id: UUID
    license_number: str
    license_expiry: Optional[date] = None
    vehicle_id: Optional[UUID] = None
    status: str
    is_verified: bool
    verified_at: Optional[datetime] = None
    suspension_reason: Optional[str] = None
    suspended_at: Optional[datetime] = None
    current_lat: Optional[float] = None
    current_lng: Optional[float] = None
    last_location_update: Optional[datetime] = None
    rating: Optional[float] = None
    total_deliveries: int = 0
    created_at: datetime
    updated_at: datetime
    profile: Optional[DriverProfileSummary] = None
    vehicle: Optional[VehicleResponse] = None

    class Config:
        from_attributes = True

class DriverShipmentSummary(BaseModel):
    id: UUID
    tracking_number: str
    status: str
    destination: str

    class Config:
        from_attributes = True

class DriverDetailResponse(DriverResponse):
    current_shipments: List[DriverShipmentSummary] = []

class DriverListResponse(PaginatedResponse):
    drivers: List[DriverResponse]

class DriverMutationResponse(BaseModel):
    message: str
    driver: DriverResponse

class DriverStatsResponse(BaseModel):
    total: int = 0
    active: int = 0
    on_delivery: int = 0
    suspended: int = 0
    inactive: int = 0

class DriverRouteResponse(BaseModel):
    id: UUID
    driver_id: UUID
    shipment_ids: List[Any] = []
    waypoints: Optional[Any] = None
    is_active: bool
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class DriverRouteEnvelope(BaseModel):
    route: Optional[DriverRouteResponse] = None
    message: Optional[str] = None

class DriverPerformanceResponse(BaseModel):
    total_deliveries: int
    on_time_deliveries: int
    on_time_rate: float
    average_delivery_days: float
    rating: float
