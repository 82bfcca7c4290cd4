# app/modules/drivers/service.py
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID
from fastapi import HTTPException
from sqlalchemy.orm import Session
import logging

from app.config.constants import DriverStatus, ShipmentStatus
from app.core.auth.dependencies import is_admin
from app.shared.database.models import Driver, User, Vehicle
from app.shared.utils.helpers import pagination_meta, parse_pagination, to_float, utcnow
from .repository import DriversRepository, VehiclesRepository
from .schemas import (
    DriverCreate, DriverUpdate, DriverLocationUpdate, DriverDetailResponse,
    DriverPerformanceResponse, DriverShipmentSummary, VehicleCreate
)

logger = logging.getLogger(__name__)

class DriversService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = DriversRepository(db)
        self.vehicles = VehiclesRepository(db)

    def _get_driver(self, driver_id: UUID) -> Driver:
        driver = self.repository.get_by_id(driver_id)
        if not driver:
            raise HTTPException(status_code=404, detail="Driver not found")
        return driver

    def _get_visible_driver(self, driver_id: UUID, current_user: User) -> Driver:
        """Drivers only reach their own record"""
        driver = self._get_driver(driver_id)
        if not is_admin(current_user) and driver.user_id != current_user.id:
            raise HTTPException(status_code=403, detail="You can only access your own driver profile")
        return driver

    def _assign_vehicle(self, driver: Driver, vehicle_id: Optional[UUID]) -> None:
        """Move the driver to another vehicle, freeing the previous one"""
        new_vehicle = None
        if vehicle_id is not None:
            new_vehicle = self.vehicles.get_by_id(vehicle_id)
            if not new_vehicle:
                raise HTTPException(status_code=404, detail="Vehicle not found")
            if new_vehicle.is_assigned and new_vehicle.assigned_driver_id != driver.id:
                raise HTTPException(status_code=409, detail="Vehicle is already assigned to another driver")

        if driver.vehicle_id and driver.vehicle_id != vehicle_id:
            previous = self.vehicles.get_by_id(driver.vehicle_id)
            if previous:
                previous.is_assigned = False
                previous.assigned_driver_id = None

        driver.vehicle_id = vehicle_id
        if new_vehicle is not None:
            new_vehicle.is_assigned = True
            new_vehicle.assigned_driver_id = driver.id

    async def list_drivers(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> Dict[str, Any]:
        pagination = parse_pagination(page, limit)
        drivers, total = self.repository.list_drivers(
            pagination["offset"], pagination["limit"], status=status, search=search
        )
        return {"drivers": drivers, **pagination_meta(total, pagination["page"], pagination["limit"])}

    async def get_stats(self) -> Dict[str, int]:
        counts = self.repository.count_by_status()
        return {
            "total": sum(counts.values()),
            "active": counts.get(DriverStatus.ACTIVE.value, 0),
            "on_delivery": counts.get(DriverStatus.ON_DELIVERY.value, 0),
            "suspended": counts.get(DriverStatus.SUSPENDED.value, 0),
            "inactive": counts.get(DriverStatus.INACTIVE.value, 0)
        }

    async def get_driver(self, driver_id: UUID, current_user: User) -> DriverDetailResponse:
        driver = self._get_visible_driver(driver_id, current_user)
        response = DriverDetailResponse.model_validate(driver)
        response.current_shipments = [
            DriverShipmentSummary.model_validate(shipment)
            for shipment in self.repository.get_current_shipments(driver.id)
        ]
        return response

    async def create_driver(self, data: DriverCreate) -> Driver:
        user = self.db.query(User).filter(User.id == data.user_id).first()
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if self.repository.get_by_user_id(user.id):
            raise HTTPException(status_code=409, detail="User is already registered as a driver")
        if self.repository.get_by_license(data.license_number):
            raise HTTPException(status_code=409, detail="License number is already registered")

        driver = self.repository.create({
            "user_id": user.id,
            "license_number": data.license_number,
            "license_expiry": data.license_expiry,
            "status": DriverStatus.ACTIVE.value
        }, user)
        if data.vehicle_id:
            self._assign_vehicle(driver, data.vehicle_id)

        driver = self.repository.save(driver)
        logger.info(f"🚚 Driver profile created for {user.email} (license {driver.license_number})")
        return driver

    async def update_driver(self, driver_id: UUID, data: DriverUpdate) -> Driver:
        driver = self._get_driver(driver_id)
        fields = data.model_fields_set

        if data.license_number and data.license_number != driver.license_number:
            if self.repository.get_by_license(data.license_number):
                raise HTTPException(status_code=409, detail="License number is already registered")
            driver.license_number = data.license_number
        if data.license_expiry:
            driver.license_expiry = data.license_expiry
        if data.status:
            driver.status = data.status
        if "vehicle_id" in fields:
            self._assign_vehicle(driver, data.vehicle_id)

        return self.repository.save(driver)

    async def deactivate_driver(self, driver_id: UUID) -> Driver:
        """Soft delete"""
        driver = self._get_driver(driver_id)
        driver.status = DriverStatus.INACTIVE.value
        logger.info(f"⛔ Driver {driver.id} deactivated")
        return self.repository.save(driver)

    async def suspend_driver(self, driver_id: UUID, reason: Optional[str]) -> Driver:
        driver = self._get_driver(driver_id)
        driver.status = DriverStatus.SUSPENDED.value
        driver.suspension_reason = reason
        driver.suspended_at = utcnow()
        logger.warning(f"⚠️ Driver {driver.id} suspended: {reason}")
        return self.repository.save(driver)

    async def reactivate_driver(self, driver_id: UUID) -> Driver:
        driver = self._get_driver(driver_id)
        driver.status = DriverStatus.ACTIVE.value
        driver.suspension_reason = None
        driver.suspended_at = None
        return self.repository.save(driver)

    async def verify_driver(self, driver_id: UUID) -> Driver:
        driver = self._get_driver(driver_id)
        driver.is_verified = True
        driver.verified_at = utcnow()
        return self.repository.save(driver)

    async def assign_vehicle(self, driver_id: UUID, vehicle_id: UUID) -> Driver:
        driver = self._get_driver(driver_id)
        self._assign_vehicle(driver, vehicle_id)
        driver = self.repository.save(driver)
        logger.info(f"🔑 Vehicle {vehicle_id} assigned to driver {driver.id}")
        return driver

    async def update_location(self, driver_id: UUID, data: DriverLocationUpdate, current_user: User) -> Driver:
        driver = self._get_visible_driver(driver_id, current_user)
        driver.current_lat = data.lat
        driver.current_lng = data.lng
        driver.last_location_update = utcnow()
        return self.repository.save(driver)

    async def get_active_route(self, driver_id: UUID, current_user: User) -> Dict[str, Any]:
        driver = self._get_visible_driver(driver_id, current_user)
        route = self.repository.get_active_route(driver.id)
        if route is None:
            return {"route": None, "message": "No active route"}
        return {"route": route, "message": None}

    async def get_performance(
        self,
        driver_id: UUID,
        current_user: User,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None
    ) -> DriverPerformanceResponse:
        """
        Delivery metrics over the driver's shipments

        On time means delivered_at <= estimated_delivery; the average delivery
        time runs from booking to delivery, in days.
        """
        driver = self._get_visible_driver(driver_id, current_user)
        shipments = self.repository.get_shipments(driver.id, start_date, end_date)

        delivered = [
            s for s in shipments
            if s.status == ShipmentStatus.DELIVERED.value and s.delivered_at is not None
        ]
        on_time = [
            s for s in delivered
            if s.estimated_delivery is not None and s.delivered_at <= s.estimated_delivery
        ]

        average_days = 0.0
        if delivered:
            total_seconds = sum((s.delivered_at - s.created_at).total_seconds() for s in delivered)
            average_days = round(total_seconds / len(delivered) / 86400, 1)

        return DriverPerformanceResponse(
            total_deliveries=len(delivered),
            on_time_deliveries=len(on_time),
            on_time_rate=round(len(on_time) / len(delivered) * 100, 1) if delivered else 0.0,
            average_delivery_days=average_days,
            rating=to_float(driver.rating)
        )

class VehiclesService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = VehiclesRepository(db)

    async def get_available(self) -> List[Vehicle]:
        return self.repository.get_available()

    async def get_all(self) -> List[Vehicle]:
        return self.repository.get_all()

    async def create_vehicle(self, data: VehicleCreate) -> Vehicle:
        if self.repository.get_by_plate(data.plate_number):
            raise HTTPException(status_code=409, detail="A vehicle with this plate number already exists")
        vehicle = self.repository.create(data.model_dump())
        logger.info(f"✅ Vehicle {vehicle.plate_number} registered")
        return vehicle
