# app/modules/tracking/router.py
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, get_optional_user
from app.modules.shipments.schemas import TrackingEventResponse
from .service import TrackingService
from .schemas import (
    PublicTrackingResponse, ActiveShipmentResponse, LiveLocationResponse,
    ShipmentDriverResponse, ETAResponse
)

router = APIRouter()

@router.get("/health")
async def tracking_health():
    """Health check of the tracking module"""
    return {
        "service": "tracking",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Public tracking by number",
            "Event timeline and history",
            "Driver location and details",
            "ETA"
        ]
    }

@router.get("/active", response_model=List[ActiveShipmentResponse])
async def get_active_shipments(
    current_user = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """
    Shipments still on the move (pending, processing, in transit, out for delivery)

    Anonymous callers get an empty list; admins see every shipment.
    """
    service = TrackingService(db)
    return await service.get_active_shipments(current_user)

@router.get("/{tracking_number}", response_model=PublicTrackingResponse)
async def track_shipment(
    tracking_number: str = Path(..., description="Tracking number, e.g. BLY-20260124-A7B3C"),
    db: Session = Depends(get_db)
):
    """Public tracking: shipment summary and events, newest first"""
    service = TrackingService(db)
    return await service.track_by_number(tracking_number)

@router.get("/{shipment_id}/timeline", response_model=List[TrackingEventResponse])
async def get_timeline(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tracking events, newest first"""
    service = TrackingService(db)
    return await service.get_timeline(shipment_id, current_user)

@router.get("/{shipment_id}/history", response_model=List[TrackingEventResponse])
async def get_history(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Tracking events in chronological order"""
    service = TrackingService(db)
    return await service.get_history(shipment_id, current_user)

@router.get("/{shipment_id}/location", response_model=LiveLocationResponse)
async def get_live_location(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Last reported position of the assigned driver"""
    service = TrackingService(db)
    return await service.get_live_location(shipment_id, current_user)

@router.get("/{shipment_id}/driver", response_model=ShipmentDriverResponse)
async def get_shipment_driver(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = TrackingService(db)
    return await service.get_driver(shipment_id, current_user)

@router.get("/{shipment_id}/eta", response_model=ETAResponse)
async def get_eta(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = TrackingService(db)
    return await service.get_eta(shipment_id, current_user)
