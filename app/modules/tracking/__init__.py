# app/modules/tracking/__init__.py
"""
Tracking Module - Read side of the tracking event log

Features:
- Public lookup by tracking number
- Active shipments of the caller
- Timeline (newest first) and history (chronological)
- Live driver location, driver details and ETA

Architecture:
- router.py: Tracking endpoints
- service.py: Access rules and response assembly
- repository.py: tracking_events and shipment lookups
- schemas.py: Response models
"""

from .router import router
from .service import TrackingService
from .repository import TrackingRepository

__all__ = [
    "router",
    "TrackingService",
    "TrackingRepository"
]
