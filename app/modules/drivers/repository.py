# app/modules/drivers/repository.py
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from app.config.constants import ACTIVE_SHIPMENT_STATUSES
from app.shared.database.models import Driver, DriverRoute, Shipment, User, Vehicle

class DriversRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, driver_id: UUID) -> Optional[Driver]:
        return (
            self.db.query(Driver)
            .options(joinedload(Driver.user), joinedload(Driver.vehicle))
            .filter(Driver.id == driver_id)
            .first()
        )

    def get_by_user_id(self, user_id: UUID) -> Optional[Driver]:
        return self.db.query(Driver).filter(Driver.user_id == user_id).first()

    def get_by_license(self, license_number: str) -> Optional[Driver]:
        return self.db.query(Driver).filter(Driver.license_number == license_number).first()

    def list_drivers(
        self,
        offset: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Tuple[List[Driver], int]:
        query = self.db.query(Driver)
        if status:
            query = query.filter(Driver.status == status)
        if search:
            query = query.filter(Driver.license_number.ilike(f"%{search}%"))

        total = query.count()
        drivers = (
            query.options(joinedload(Driver.user), joinedload(Driver.vehicle))
            .order_by(Driver.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return drivers, total

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.query(Driver.status, func.count(Driver.id)).group_by(Driver.status).all()
        return {status: count for status, count in rows}

    def get_current_shipments(self, driver_id: UUID) -> List[Shipment]:
        return (
            self.db.query(Shipment)
            .filter(Shipment.driver_id == driver_id, Shipment.status.in_(ACTIVE_SHIPMENT_STATUSES))
            .order_by(Shipment.created_at.desc())
            .all()
        )

    def get_shipments(
        self,
        driver_id: UUID,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> List[Shipment]:
        query = self.db.query(Shipment).filter(Shipment.driver_id == driver_id)
        if start_date:
            query = query.filter(Shipment.created_at >= start_date)
        if end_date:
            query = query.filter(Shipment.created_at <= end_date)
        return query.all()

    def get_active_route(self, driver_id: UUID) -> Optional[DriverRoute]:
        return (
            self.db.query(DriverRoute)
            .filter(DriverRoute.driver_id == driver_id, DriverRoute.is_active.is_(True))
            .order_by(DriverRoute.created_at.desc())
            .first()
        )

    def create(self, data: Dict[str, Any], user: User) -> Driver:
        """Driver profile plus role promotion of the account; the caller commits"""
        driver = Driver(**data)
        user.role = "driver"
        self.db.add(driver)
        self.db.flush()
        return driver

    def save(self, driver: Driver) -> Driver:
        self.db.commit()
        self.db.refresh(driver)
        return driver

class VehiclesRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, vehicle_id: UUID) -> Optional[Vehicle]:
        return self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    def get_by_plate(self, plate_number: str) -> Optional[Vehicle]:
        return self.db.query(Vehicle).filter(Vehicle.plate_number == plate_number).first()

    def get_all(self) -> List[Vehicle]:
        return self.db.query(Vehicle).order_by(Vehicle.created_at.desc()).all()

    def get_available(self) -> List[Vehicle]:
        return (
            self.db.query(Vehicle)
            .filter(Vehicle.is_assigned.is_(False), Vehicle.is_active.is_(True))
            .order_by(Vehicle.created_at.desc())
            .all()
        )

    def create(self, data: Dict[str, Any]) -> Vehicle:
        vehicle = Vehicle(**data)
        self.db.add(vehicle)
        self.db.commit()
        self.db.refresh(vehicle)
        return vehicle
