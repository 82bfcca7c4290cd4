# app/modules/analytics/repository.py
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import case, func
from typing import Dict, List, Optional, Set, Tuple
from datetime import datetime
from uuid import UUID

from app.config.constants import ShipmentStatus
from app.shared.database.models import Driver, Shipment, User, Vehicle

DELIVERED = ShipmentStatus.DELIVERED.value
CANCELLED = ShipmentStatus.CANCELLED.value

class AnalyticsRepository:
    """Read-only aggregates over shipments, drivers, vehicles and users"""

    def __init__(self, db: Session):
        self.db = db

    def count_shipments_by_status(self) -> Dict[str, int]:
        rows = self.db.query(Shipment.status, func.count(Shipment.id)).group_by(Shipment.status).all()
        return {status: count for status, count in rows}

    def count_drivers_by_status(self) -> Dict[str, int]:
        rows = self.db.query(Driver.status, func.count(Driver.id)).group_by(Driver.status).all()
        return {status: count for status, count in rows}

    def count_users_by_role(self) -> Dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}

    def count_distinct_senders(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> int:
        query = self.db.query(func.count(func.distinct(Shipment.sender_id)))
        if start:
            query = query.filter(Shipment.created_at >= start)
        if end:
            query = query.filter(Shipment.created_at < end)
        return query.scalar() or 0

    def get_sender_ids(self, start: datetime, end: datetime) -> Set[UUID]:
        rows = (
            self.db.query(Shipment.sender_id)
            .filter(Shipment.created_at >= start, Shipment.created_at < end, Shipment.sender_id.isnot(None))
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def sum_delivered_value(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> float:
        query = (
            self.db.query(func.coalesce(func.sum(Shipment.declared_value), 0))
            .filter(Shipment.status == DELIVERED)
        )
        if start:
            query = query.filter(Shipment.created_at >= start)
        if end:
            query = query.filter(Shipment.created_at < end)
        return float(query.scalar() or 0)

    def get_delivered_values(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None
    ) -> List[Tuple[Optional[float], datetime, Optional[str]]]:
        """(declared_value, created_at, service_type) of delivered shipments, oldest first"""
        query = (
            self.db.query(Shipment.declared_value, Shipment.created_at, Shipment.service_type)
            .filter(Shipment.status == DELIVERED)
        )
        if start:
            query = query.filter(Shipment.created_at >= start)
        if end:
            query = query.filter(Shipment.created_at <= end)
        return query.order_by(Shipment.created_at.asc()).all()

    def get_status_counts_since(self, start: datetime) -> Dict[str, int]:
        rows = (
            self.db.query(Shipment.status, func.count(Shipment.id))
            .filter(Shipment.created_at >= start)
            .group_by(Shipment.status)
            .all()
        )
        return {status: count for status, count in rows}

    def get_regional_performance(self, limit: int = 10) -> List[Tuple[str, int, int, float]]:
        """(destination, shipments, delivered, delivered declared value) busiest first"""
        delivered = case((Shipment.status == DELIVERED, 1), else_=0)
        delivered_value = case((Shipment.status == DELIVERED, Shipment.declared_value), else_=0)
        return (
            self.db.query(
                Shipment.destination,
                func.count(Shipment.id).label("shipments"),
                func.coalesce(func.sum(delivered), 0),
                func.coalesce(func.sum(delivered_value), 0)
            )
            .group_by(Shipment.destination)
            .order_by(func.count(Shipment.id).desc())
            .limit(limit)
            .all()
        )

    def count_shipments_since(self, start: datetime) -> int:
        return self.db.query(func.count(Shipment.id)).filter(Shipment.created_at >= start).scalar() or 0

    def get_cancellation_reasons(self, start: datetime) -> List[Tuple[Optional[str], int]]:
        return (
            self.db.query(Shipment.cancellation_reason, func.count(Shipment.id))
            .filter(Shipment.status == CANCELLED, Shipment.created_at >= start)
            .group_by(Shipment.cancellation_reason)
            .order_by(func.count(Shipment.id).desc())
            .all()
        )

    def get_vehicle_flags(self) -> List[Tuple[bool, bool]]:
        """(is_assigned, is_active) of every vehicle"""
        return self.db.query(Vehicle.is_assigned, Vehicle.is_active).all()

    def get_moving_shipments(self) -> List[Shipment]:
        return (
            self.db.query(Shipment)
            .options(joinedload(Shipment.driver))
            .filter(Shipment.status.in_([
                ShipmentStatus.IN_TRANSIT.value, ShipmentStatus.OUT_FOR_DELIVERY.value
            ]))
            .order_by(Shipment.updated_at.desc())
            .all()
        )

    def get_delivered_timings(self) -> List[Tuple[datetime, datetime, Optional[datetime]]]:
        """(created_at, delivered_at, estimated_delivery) of delivered shipments"""
        return (
            self.db.query(Shipment.created_at, Shipment.delivered_at, Shipment.estimated_delivery)
            .filter(Shipment.status == DELIVERED, Shipment.delivered_at.isnot(None))
            .all()
        )

    def count_customers(self, since: Optional[datetime] = None) -> int:
        query = self.db.query(func.count(User.id)).filter(User.role == "user")
        if since:
            query = query.filter(User.created_at >= since)
        return query.scalar() or 0
