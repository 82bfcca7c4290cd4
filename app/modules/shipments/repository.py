# app/modules/shipments/repository.py
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from app.shared.database.models import Driver, Shipment, ShipmentDocument

class ShipmentsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, shipment_id: UUID) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.id == shipment_id).first()

    def get_detail(self, shipment_id: UUID) -> Optional[Shipment]:
        """Shipment with sender, driver profile and tracking events loaded"""
        return (
            self.db.query(Shipment)
            .options(
                joinedload(Shipment.sender),
                joinedload(Shipment.driver).joinedload(Driver.user),
                joinedload(Shipment.tracking_events)
            )
            .filter(Shipment.id == shipment_id)
            .first()
        )

    def get_by_tracking_number(self, tracking_number: str) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.tracking_number == tracking_number).first()

    def list_shipments(
        self,
        offset: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sender_id: Optional[UUID] = None,
        driver_id: Optional[UUID] = None
    ) -> Tuple[List[Shipment], int]:
        query = self.db.query(Shipment)

        if status:
            query = query.filter(Shipment.status == status)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Shipment.tracking_number.ilike(pattern),
                Shipment.receiver_name.ilike(pattern)
            ))
        if sender_id:
            query = query.filter(Shipment.sender_id == sender_id)
        if driver_id:
            query = query.filter(Shipment.driver_id == driver_id)

        total = query.count()
        shipments = (
            query.options(
                joinedload(Shipment.sender),
                joinedload(Shipment.driver).joinedload(Driver.user)
            )
            .order_by(Shipment.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return shipments, total

    def count_by_status(self, sender_id: Optional[UUID] = None) -> Dict[str, int]:
        """{status: count}, optionally for one sender"""
        query = self.db.query(Shipment.status, func.count(Shipment.id))
        if sender_id:
            query = query.filter(Shipment.sender_id == sender_id)
        return {status: count for status, count in query.group_by(Shipment.status).all()}

    def create(self, data: Dict[str, Any]) -> Shipment:
        """Adds the shipment and flushes so it gets an id; the caller commits"""
        shipment = Shipment(**data)
        self.db.add(shipment)
        self.db.flush()
        return shipment

    def apply_updates(self, shipment: Shipment, updates: Dict[str, Any]) -> Shipment:
        for field, value in updates.items():
            setattr(shipment, field, value)
        return shipment

    def save(self, shipment: Shipment) -> Shipment:
        self.db.commit()
        self.db.refresh(shipment)
        return shipment

    def delete(self, shipment: Shipment) -> None:
        self.db.delete(shipment)
        self.db.commit()

    # ===== DOCUMENTS =====

    def get_documents(self, shipment_id: UUID) -> List[ShipmentDocument]:
        return (
            self.db.query(ShipmentDocument)
            .filter(ShipmentDocument.shipment_id == shipment_id)
            .order_by(ShipmentDocument.created_at.asc())
            .all()
        )

    def create_document(self, shipment_id: UUID, name: str, type: Optional[str], url: str) -> ShipmentDocument:
        document = ShipmentDocument(shipment_id=shipment_id, name=name, type=type, url=url)
        self.db.add(document)
        self.db.commit()
        self.db.refresh(document)
        return document
