# app/modules/pricing/service.py
from typing import List, Optional, Tuple
from uuid import UUID
from fastapi import HTTPException
from sqlalchemy.orm import Session
import logging

from app.config.constants import (
    DEFAULT_PRICING_CONFIGS, FALLBACK_PRICING, FALLBACK_SERVICE_TYPE
)
from app.shared.database.models import PricingConfig
from .repository import PricingRepository
from .schemas import (
    PricingConfigCreate, PricingConfigUpdate, PriceCalculationRequest, PriceCalculationResponse
)

logger = logging.getLogger(__name__)

def normalize_service_type(service_type: Optional[str], default: str = FALLBACK_SERVICE_TYPE) -> str:
    return service_type.lower().strip() if service_type else default

def compute_fee(rates: Tuple[float, float, float], weight: Optional[float], distance: Optional[float]) -> float:
    """base + per_kg * weight + per_km * distance, missing inputs count as 0"""
    base, per_kg, per_km = rates
    return float(base) + float(per_kg) * float(weight or 0) + float(per_km) * float(distance or 0)

def fallback_rates(service_type: str) -> Tuple[float, float, float]:
    return FALLBACK_PRICING.get(service_type, FALLBACK_PRICING[FALLBACK_SERVICE_TYPE])

class PricingService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = PricingRepository(db)

    def calculate_fee(self, service_type: Optional[str], weight: Optional[float], distance: Optional[float] = 0) -> float:
        """Fee for a shipment, using the active config or the static fallback table"""
        normalized = normalize_service_type(service_type)
        config = self.repository.get_active_for_service_type(normalized)

        if config is None:
            logger.info(f"ℹ️ No active pricing for '{normalized}', using fallback rates")
            return compute_fee(fallback_rates(normalized), weight, distance)

        return compute_fee(
            (config.base_price, config.price_per_kg, config.price_per_km), weight, distance
        )

    async def get_pricing_configs(self) -> List[PricingConfig]:
        configs = self.repository.get_all()
        if not configs:
            logger.info("🌱 Pricing table empty, seeding default tonnage rates")
            configs = self.repository.bulk_create(DEFAULT_PRICING_CONFIGS)
        return configs

    async def calculate_price(self, request: PriceCalculationRequest) -> PriceCalculationResponse:
        if not request.service_type or not request.service_type.strip():
            raise HTTPException(status_code=400, detail="Service type is required")

        price = self.calculate_fee(request.service_type, request.weight, request.distance)
        return PriceCalculationResponse(
            service_type=request.service_type,
            weight=request.weight,
            distance=request.distance,
            estimated_price=price
        )

    async def create_pricing_config(self, data: PricingConfigCreate) -> PricingConfig:
        payload = data.model_dump()
        payload["service_type"] = normalize_service_type(data.service_type)
        if self.repository.get_active_for_service_type(payload["service_type"]):
            raise HTTPException(status_code=409, detail="A pricing configuration for this service type already exists")
        config = self.repository.create(payload)
        logger.info(f"✅ Pricing config created for '{config.service_type}'")
        return config

    async def update_pricing_config(self, config_id: UUID, data: PricingConfigUpdate) -> PricingConfig:
        config = self.repository.get_by_id(config_id)
        if not config:
            raise HTTPException(status_code=404, detail="Pricing configuration not found")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        config = self.repository.update(config, updates)
        logger.info(f"✏️ Pricing config '{config.service_type}' updated: {updates}")
        return config
