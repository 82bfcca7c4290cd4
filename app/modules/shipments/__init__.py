# app/modules/shipments/__init__.py
"""
Shipments Module - Booking and lifecycle of shipments

Features:
- Booking with tracking number, fee quote and ETA
- Role-gated updates (sender while pending, assigned driver, admin)
- Status transitions recorded as tracking events, sender notified
- Cancellation and deletion of pending shipments
- Shipment documents stored in Cloudinary
- Per-user shipment history and counters

Architecture:
- router.py: Shipment endpoints (+ /users/{id}/shipments)
- service.py: Business rules and access control
- repository.py: shipments and shipment_documents data access
- schemas.py: Request/response models
- utils.py: Tracking number and ETA helpers
"""

from .router import router, user_shipments_router
from .service import ShipmentsService, can_read_shipment
from .repository import ShipmentsRepository
from .utils import generate_tracking_number, calculate_eta

__all__ = [
    "router",
    "user_shipments_router",
    "ShipmentsService",
    "ShipmentsRepository",
    "can_read_shipment",
    "generate_tracking_number",
    "calculate_eta"
]
