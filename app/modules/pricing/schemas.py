# app/modules/pricing/schemas.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

class PricingConfigResponse(BaseModel):
    id: UUID
    service_type: str
    base_price: float
    price_per_kg: float
    price_per_km: float
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PricingConfigCreate(BaseModel):
    service_type: str = Field(..., min_length=1, alias="serviceType")
    base_price: float = Field(..., ge=0)
    price_per_kg: float = Field(0, ge=0)
    price_per_km: float = Field(0, ge=0)
    is_active: bool = True

    class Config:
        populate_by_name = True

class PricingConfigUpdate(BaseModel):
    base_price: Optional[float] = Field(None, ge=0)
    price_per_kg: Optional[float] = Field(None, ge=0)
    price_per_km: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None

class PricingConfigUpdateResponse(BaseModel):
    message: str
    config: PricingConfigResponse

class PriceCalculationRequest(BaseModel):
    """Quote request; service_type is checked by the service for a 400"""
    service_type: Optional[str] = Field(None, alias="serviceType")
    weight: Optional[float] = Field(None, ge=0)
    distance: Optional[float] = Field(None, ge=0)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {"serviceType": "5 tons", "weight": 1200, "distance": 35}
        }

class PriceCalculationResponse(BaseModel):
    service_type: str
    weight: Optional[float] = None
    distance: Optional[float] = None
    estimated_price: float
