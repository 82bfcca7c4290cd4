# app/modules/tracking/service.py
from typing import List, Optional
from uuid import UUID
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core.auth.dependencies import is_admin
from app.modules.shipments.schemas import TrackingEventResponse
from app.modules.shipments.service import ShipmentsService
from app.shared.database.models import Shipment, TrackingEvent, User
from .repository import TrackingRepository
from .schemas import (
    PublicTrackingResponse, LiveLocationResponse, ShipmentDriverResponse, VehicleSummary, ETAResponse
)

class TrackingService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = TrackingRepository(db)
        self.shipments = ShipmentsService(db)

    async def track_by_number(self, tracking_number: str) -> PublicTrackingResponse:
        shipment = self.repository.get_by_tracking_number(tracking_number)
        if not shipment:
            raise HTTPException(status_code=404, detail="No shipment found with this tracking number")

        return PublicTrackingResponse(
            tracking_number=shipment.tracking_number,
            status=shipment.status,
            origin=shipment.origin,
            destination=shipment.destination,
            estimated_delivery=shipment.estimated_delivery,
            service_type=shipment.service_type,
            receiver_name=shipment.receiver_name,
            created_at=shipment.created_at,
            delivered_at=shipment.delivered_at,
            events=[
                TrackingEventResponse.model_validate(event)
                for event in self.repository.get_events(shipment.id, newest_first=True)
            ]
        )

    async def get_active_shipments(self, current_user: Optional[User]) -> List[Shipment]:
        # Anonymous visitors get an empty list, tracking by number stays public
        if current_user is None:
            return []
        sender_id = None if is_admin(current_user) else current_user.id
        return self.repository.get_active_shipments(sender_id)

    async def get_timeline(self, shipment_id: UUID, current_user: User) -> List[TrackingEvent]:
        self.shipments.get_readable_shipment(shipment_id, current_user)
        return self.repository.get_events(shipment_id, newest_first=True)

    async def get_history(self, shipment_id: UUID, current_user: User) -> List[TrackingEvent]:
        self.shipments.get_readable_shipment(shipment_id, current_user)
        return self.repository.get_events(shipment_id, newest_first=False)

    async def get_live_location(self, shipment_id: UUID, current_user: User) -> LiveLocationResponse:
        shipment = self.shipments.get_readable_shipment(shipment_id, current_user)
        driver = shipment.driver

        if driver is None or driver.current_lat is None:
            return LiveLocationResponse(message="Location not available")

        return LiveLocationResponse(
            lat=driver.current_lat,
            lng=driver.current_lng,
            last_updated=driver.last_location_update
        )

    async def get_driver(self, shipment_id: UUID, current_user: User) -> ShipmentDriverResponse:
        shipment = self.shipments.get_readable_shipment(shipment_id, current_user)
        driver = shipment.driver
        if driver is None:
            raise HTTPException(status_code=404, detail="No driver assigned to this shipment")

        profile = driver.user
        return ShipmentDriverResponse(
            id=driver.id,
            name=profile.full_name if profile else "",
            phone=profile.phone if profile else None,
            avatar=profile.avatar_url if profile else None,
            vehicle=VehicleSummary.model_validate(driver.vehicle) if driver.vehicle else None
        )

    async def get_eta(self, shipment_id: UUID, current_user: User) -> ETAResponse:
        shipment = self.shipments.get_readable_shipment(shipment_id, current_user)
        # Distance needs geocoding, which is not available
        return ETAResponse(eta=shipment.estimated_delivery, status=shipment.status, distance=None)
