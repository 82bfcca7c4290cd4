# app/modules/tracking/repository.py
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from app.config.constants import ACTIVE_SHIPMENT_STATUSES
from app.shared.database.models import Shipment, TrackingEvent

class TrackingRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_events(self, shipment_id: UUID, newest_first: bool = True) -> List[TrackingEvent]:
        order = TrackingEvent.created_at.desc() if newest_first else TrackingEvent.created_at.asc()
        return (
            self.db.query(TrackingEvent)
            .filter(TrackingEvent.shipment_id == shipment_id)
            .order_by(order)
            .all()
        )

    def get_by_tracking_number(self, tracking_number: str) -> Optional[Shipment]:
        return (
            self.db.query(Shipment)
            .filter(Shipment.tracking_number == tracking_number.strip().upper())
            .first()
        )

    def get_active_shipments(self, sender_id: Optional[UUID] = None) -> List[Shipment]:
        query = self.db.query(Shipment).filter(Shipment.status.in_(ACTIVE_SHIPMENT_STATUSES))
        if sender_id:
            query = query.filter(Shipment.sender_id == sender_id)
        return query.order_by(Shipment.created_at.desc()).all()
