# app/modules/pricing/__init__.py
"""
Pricing Module - Shipping fee configuration and calculation

Features:
- Public list of pricing configurations (seeded with tonnage defaults when empty)
- Public fee quote: base + per kg * weight + per km * distance
- Static fallback rates when no active configuration exists
- Admin creation and update of pricing configurations

Architecture:
- router.py: Pricing endpoints
- service.py: Fee calculation and business rules
- repository.py: pricing_configs data access
- schemas.py: Request/response models
"""

from .router import router
from .service import PricingService, compute_fee
from .repository import PricingRepository

__all__ = [
    "router",
    "PricingService",
    "PricingRepository",
    "compute_fee"
]
