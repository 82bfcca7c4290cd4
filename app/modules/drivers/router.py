# app/modules/drivers/router.py
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user, get_current_user, get_driver_or_admin_user
from .service import DriversService, VehiclesService
from .schemas import (
    DriverCreate, DriverUpdate, DriverSuspendRequest, AssignVehicleRequest, DriverLocationUpdate,
    DriverResponse, DriverDetailResponse, DriverListResponse, DriverMutationResponse,
    DriverStatsResponse, DriverRouteEnvelope, DriverPerformanceResponse,
    VehicleCreate, VehicleResponse
)

router = APIRouter()

# Mounted under /vehicles
vehicles_router = APIRouter()

@router.get("/health")
async def drivers_health():
    """Health check of the drivers module"""
    return {
        "service": "drivers",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Driver management",
            "Suspension and verification",
            "Vehicle assignment",
            "Live location",
            "Delivery performance"
        ]
    }

@router.get("/stats", response_model=DriverStatsResponse)
async def get_driver_stats(
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Driver counters by status (admin)"""
    service = DriversService(db)
    return await service.get_stats()

@router.get("", response_model=DriverListResponse)
async def get_drivers(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filter by driver status"),
    search: Optional[str] = Query(None, description="License number"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """List drivers with profile and vehicle, newest first (admin)"""
    service = DriversService(db)
    return await service.list_drivers(page=page, limit=limit, status=status, search=search)

@router.post("", response_model=DriverMutationResponse, status_code=201)
async def create_driver(
    data: DriverCreate,
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """
    Register an existing account as a driver (admin)

    The account's role becomes `driver` and the driver starts `active`.
    """
    service = DriversService(db)
    driver = await service.create_driver(data)
    return {"message": "Driver created successfully", "driver": driver}

@router.get("/{driver_id}", response_model=DriverDetailResponse)
async def get_driver(
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_driver_or_admin_user),
    db: Session = Depends(get_db)
):
    """Driver with profile, vehicle and active shipments"""
    service = DriversService(db)
    return await service.get_driver(driver_id, current_user)

@router.put("/{driver_id}", response_model=DriverMutationResponse)
async def update_driver(
    data: DriverUpdate,
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = DriversService(db)
    driver = await service.update_driver(driver_id, data)
    return {"message": "Driver updated successfully", "driver": driver}

@router.delete("/{driver_id}")
async def delete_driver(
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Deactivate a driver (soft delete)"""
    service = DriversService(db)
    await service.deactivate_driver(driver_id)
    return {"message": "Driver deactivated successfully"}

@router.post("/{driver_id}/suspend", response_model=DriverMutationResponse)
async def suspend_driver(
    driver_id: UUID = Path(..., description="Driver ID"),
    payload: Optional[DriverSuspendRequest] = None,
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = DriversService(db)
    driver = await service.suspend_driver(driver_id, payload.reason if payload else None)
    return {"message": "Driver suspended", "driver": driver}

@router.post("/{driver_id}/reactivate", response_model=DriverMutationResponse)
async def reactivate_driver(
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = DriversService(db)
    driver = await service.reactivate_driver(driver_id)
    return {"message": "Driver reactivated", "driver": driver}

@router.post("/{driver_id}/verify", response_model=DriverMutationResponse)
async def verify_driver(
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = DriversService(db)
    driver = await service.verify_driver(driver_id)
    return {"message": "Driver verified successfully", "driver": driver}

@router.post("/{driver_id}/vehicle", response_model=DriverMutationResponse)
async def assign_vehicle(
    data: AssignVehicleRequest,
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Assign a vehicle; the previous one is released"""
    service = DriversService(db)
    driver = await service.assign_vehicle(driver_id, data.vehicle_id)
    return {"message": "Vehicle assigned successfully", "driver": driver}

@router.put("/{driver_id}/location", response_model=DriverResponse)
async def update_driver_location(
    data: DriverLocationUpdate,
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_driver_or_admin_user),
    db: Session = Depends(get_db)
):
    """Report the driver's current coordinates"""
    service = DriversService(db)
    return await service.update_location(driver_id, data, current_user)

@router.get("/{driver_id}/route", response_model=DriverRouteEnvelope)
async def get_driver_route(
    driver_id: UUID = Path(..., description="Driver ID"),
    current_user = Depends(get_driver_or_admin_user),
    db: Session = Depends(get_db)
):
    service = DriversService(db)
    return await service.get_active_route(driver_id, current_user)

@router.get("/{driver_id}/performance", response_model=DriverPerformanceResponse)
async def get_driver_performance(
    driver_id: UUID = Path(..., description="Driver ID"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    current_user = Depends(get_driver_or_admin_user),
    db: Session = Depends(get_db)
):
    """
    Delivery metrics

    - **on_time_rate**: percentage of deliveries made before the ETA
    - **average_delivery_days**: booking to delivery
    """
    service = DriversService(db)
    return await service.get_performance(driver_id, current_user, start_date, end_date)

# ===== /vehicles =====

@vehicles_router.get("/available", response_model=List[VehicleResponse])
async def get_available_vehicles(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Active vehicles not assigned to a driver"""
    service = VehiclesService(db)
    return await service.get_available()

@vehicles_router.get("", response_model=List[VehicleResponse])
async def get_vehicles(
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    service = VehiclesService(db)
    return await service.get_all()

@vehicles_router.post("", response_model=VehicleResponse, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Register a fleet vehicle (admin)"""
    service = VehiclesService(db)
    return await service.create_vehicle(data)
