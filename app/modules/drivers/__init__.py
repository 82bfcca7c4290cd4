# app/modules/drivers/__init__.py
"""
Drivers Module - Fleet drivers and vehicles

Features:
- Driver registration from existing accounts (role promotion)
- Suspension, reactivation, verification and soft delete
- Vehicle assignment with release of the previous vehicle
- Live location reporting
- Active route and delivery performance
- Vehicle registry and availability

Architecture:
- router.py: Driver endpoints (+ /vehicles)
- service.py: Driver and vehicle business rules
- repository.py: drivers, vehicles and driver_routes data access
- schemas.py: Request/response models
"""

from .router import router, vehicles_router
from .service import DriversService, VehiclesService
from .repository import DriversRepository, VehiclesRepository

__all__ = [
    "router",
    "vehicles_router",
    "DriversService",
    "VehiclesService",
    "DriversRepository",
    "VehiclesRepository"
]
