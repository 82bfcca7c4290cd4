# app/modules/pricing/router.py
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user
from .service import PricingService
from .schemas import (
    PricingConfigResponse, PricingConfigCreate, PricingConfigUpdate, PricingConfigUpdateResponse,
    PriceCalculationRequest, PriceCalculationResponse
)

router = APIRouter()

@router.get("/health")
async def pricing_health():
    """Health check of the pricing module"""
    return {
        "service": "pricing",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Pricing configurations",
            "Fee quotes",
            "Fallback rates"
        ]
    }

@router.get("", response_model=List[PricingConfigResponse])
async def get_pricing_configs(db: Session = Depends(get_db)):
    """
    All pricing configurations, ordered by service type

    An empty table is seeded with the 5, 10 and 15 tons defaults.
    """
    service = PricingService(db)
    return await service.get_pricing_configs()

@router.post("/calculate", response_model=PriceCalculationResponse)
async def calculate_price(
    request: PriceCalculationRequest,
    db: Session = Depends(get_db)
):
    """
    Quote a shipping fee

    **Formula:** base + per_kg * weight + per_km * distance
    """
    service = PricingService(db)
    return await service.calculate_price(request)

@router.post("", response_model=PricingConfigResponse, status_code=201)
async def create_pricing_config(
    data: PricingConfigCreate,
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Create a pricing configuration (admin)"""
    service = PricingService(db)
    return await service.create_pricing_config(data)

@router.put("/{config_id}", response_model=PricingConfigUpdateResponse)
async def update_pricing_config(
    data: PricingConfigUpdate,
    config_id: UUID = Path(..., description="Pricing configuration ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Update rates or activation of a pricing configuration (admin)"""
    service = PricingService(db)
    config = await service.update_pricing_config(config_id, data)
    return {
        "message": "Pricing configuration updated successfully",
        "config": config
    }
