# app/modules/shipments/router.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from .service import ShipmentsService
from .schemas import (
    ShipmentCreate, ShipmentUpdate, ShipmentCancelRequest, ShipmentMutationResponse,
    ShipmentListResponse, ShipmentDetailResponse, ShipmentStatsResponse,
    UserShipmentStatsResponse, ShipmentDocumentResponse
)

router = APIRouter()

# Mounted under /users
user_shipments_router = APIRouter()

@router.get("/health")
async def shipments_health():
    """Health check of the shipments module"""
    return {
        "service": "shipments",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Shipment booking",
            "Fee and ETA calculation",
            "Role-gated status transitions",
            "Tracking events",
            "Shipment documents"
        ]
    }

@router.get("/stats", response_model=ShipmentStatsResponse)
async def get_shipment_stats(db: Session = Depends(get_db)):
    """Public shipment counters by status"""
    service = ShipmentsService(db)
    return await service.get_stats()

@router.get("", response_model=ShipmentListResponse)
async def get_shipments(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filter by status"),
    search: Optional[str] = Query(None, description="Tracking number or receiver name"),
    user_id: Optional[UUID] = Query(None, alias="userId", description="Sender filter (admin)"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List shipments, newest first

    **Visibility:**
    - admin: every shipment
    - driver: shipments assigned to them
    - user: their own shipments
    """
    service = ShipmentsService(db)
    return await service.list_shipments(
        current_user, page=page, limit=limit, status=status, search=search, user_id=user_id
    )

@router.post("", response_model=ShipmentMutationResponse, status_code=201)
async def create_shipment(
    data: ShipmentCreate,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Book a shipment

    The fee is quoted from the active pricing config (distance 0 km), the ETA
    from the service type, and the first tracking event is recorded.
    """
    service = ShipmentsService(db)
    shipment = await service.create_shipment(data, current_user)
    return {"message": "Shipment created successfully", "shipment": shipment}

@router.get("/{shipment_id}", response_model=ShipmentDetailResponse)
async def get_shipment(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Shipment with sender, driver and tracking events"""
    service = ShipmentsService(db)
    return await service.get_shipment(shipment_id, current_user)

@router.put("/{shipment_id}", response_model=ShipmentMutationResponse)
async def update_shipment(
    data: ShipmentUpdate,
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(require_roles(["admin", "driver", "user"])),
    db: Session = Depends(get_db)
):
    """
    Update a shipment

    **Rules:**
    - user: own shipments while pending, no status or driver changes
    - driver: status (and event location/description) of assigned shipments
    - admin: unrestricted, may assign a driver

    A status change appends a tracking event and notifies the sender.
    """
    service = ShipmentsService(db)
    shipment = await service.update_shipment(shipment_id, data, current_user)
    return {"message": "Shipment updated successfully", "shipment": shipment}

@router.delete("/{shipment_id}")
async def delete_shipment(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(require_roles(["admin", "user"])),
    db: Session = Depends(get_db)
):
    """Delete a pending shipment (owner or admin)"""
    service = ShipmentsService(db)
    await service.delete_shipment(shipment_id, current_user)
    return {"message": "Shipment deleted successfully"}

@router.post("/{shipment_id}/cancel", response_model=ShipmentMutationResponse)
async def cancel_shipment(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    payload: Optional[ShipmentCancelRequest] = None,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel a shipment that is not delivered or already cancelled"""
    service = ShipmentsService(db)
    reason = payload.reason if payload else None
    shipment = await service.cancel_shipment(shipment_id, reason, current_user)
    return {"message": "Shipment cancelled successfully", "shipment": shipment}

@router.get("/{shipment_id}/documents", response_model=List[ShipmentDocumentResponse])
async def get_shipment_documents(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShipmentsService(db)
    return await service.get_documents(shipment_id, current_user)

@router.post("/{shipment_id}/documents", response_model=ShipmentDocumentResponse, status_code=201)
async def upload_shipment_document(
    shipment_id: UUID = Path(..., description="Shipment ID"),
    name: str = Form(..., description="Document name"),
    type: Optional[str] = Form(None, description="Document type (waybill, invoice, photo...)"),
    file: UploadFile = File(..., description="PDF or image"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Attach a document to a shipment

    **Accepted:** PDF, JPEG, PNG, WEBP up to the configured size
    """
    service = ShipmentsService(db)
    return await service.upload_document(shipment_id, name, type, file, current_user)

# ===== /users/{user_id}/... =====

@user_shipments_router.get("/{user_id}/shipments", response_model=ShipmentListResponse)
async def get_user_shipments(
    user_id: UUID = Path(..., description="User ID"),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Shipment history of a user (admin, or the user themself)"""
    service = ShipmentsService(db)
    return await service.get_user_shipments(user_id, current_user, page=page, limit=limit)

@user_shipments_router.get("/{user_id}/shipment-stats", response_model=UserShipmentStatsResponse)
async def get_user_shipment_stats(
    user_id: UUID = Path(..., description="User ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = ShipmentsService(db)
    return await service.get_user_shipment_stats(user_id, current_user)
