# app/modules/users/router.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, File, Path, Query, UploadFile
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_admin_user, get_current_user
from app.core.auth.schemas import ChangePasswordRequest, UserResponse
from .service import UsersService, AddressesService
from .schemas import (
    UserListResponse, ProfileResponse, ProfileUpdate, AdminUserUpdate, UserMutationResponse,
    AddressCreate, AddressUpdate, AddressResponse, NotificationResponse, NotificationListResponse
)

router = APIRouter()

# Mounted under /addresses; the same handlers also live under /users/addresses
addresses_router = APIRouter()

@router.get("/health")
async def users_health():
    """Health check of the users module"""
    return {
        "service": "users",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "User administration",
            "Profile and avatar",
            "Password change",
            "Saved addresses",
            "Notifications"
        ]
    }

@router.get("", response_model=UserListResponse)
async def get_users(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None, description="First name, last name or email"),
    role: Optional[str] = Query(None, description="Filter by role"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """List accounts, newest first (admin)"""
    service = UsersService(db)
    return await service.list_users(page=page, limit=limit, search=search, role=role)

# ===== PROFILE =====

@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Current profile with booking stats

    - **shipments**: number of shipments booked
    - **volume**: sum of their shipping fees
    """
    service = UsersService(db)
    return await service.get_profile(current_user)

@router.put("/profile", response_model=UserMutationResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    user = await service.update_profile(current_user, data)
    return {"message": "Profile updated successfully", "user": user}

@router.post("/profile/avatar", response_model=UserMutationResponse)
async def upload_avatar(
    image: UploadFile = File(..., description="JPEG, PNG or WEBP"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Upload a profile picture to Cloudinary"""
    service = UsersService(db)
    user = await service.update_avatar(current_user, image)
    return {"message": "Avatar updated successfully", "user": user}

@router.post("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    await service.change_password(current_user, data)
    return {"message": "Password changed successfully"}

# ===== ADDRESSES =====

@router.get("/addresses", response_model=List[AddressResponse])
@addresses_router.get("", response_model=List[AddressResponse])
async def get_addresses(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Saved addresses, default first"""
    service = AddressesService(db)
    return await service.get_addresses(current_user)

@router.post("/addresses", response_model=AddressResponse, status_code=201)
@addresses_router.post("", response_model=AddressResponse, status_code=201)
async def add_address(
    data: AddressCreate,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Save an address; a new default replaces the previous one"""
    service = AddressesService(db)
    return await service.add_address(data, current_user)

@router.put("/addresses/{address_id}", response_model=AddressResponse)
@addresses_router.put("/{address_id}", response_model=AddressResponse)
async def update_address(
    data: AddressUpdate,
    address_id: UUID = Path(..., description="Address ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = AddressesService(db)
    return await service.update_address(address_id, data, current_user)

@router.post("/addresses/{address_id}/set-default", response_model=AddressResponse)
@addresses_router.post("/{address_id}/set-default", response_model=AddressResponse)
async def set_default_address(
    address_id: UUID = Path(..., description="Address ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = AddressesService(db)
    return await service.set_default(address_id, current_user)

@router.delete("/addresses/{address_id}")
@addresses_router.delete("/{address_id}")
async def delete_address(
    address_id: UUID = Path(..., description="Address ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = AddressesService(db)
    await service.delete_address(address_id, current_user)
    return {"message": "Address deleted successfully"}

# ===== NOTIFICATIONS =====

@router.get("/notifications", response_model=NotificationListResponse)
async def get_notifications(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    unread_only: bool = Query(False, alias="unreadOnly"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Notifications, newest first, with the unread counter"""
    service = UsersService(db)
    return await service.get_notifications(current_user, page=page, limit=limit, unread_only=unread_only)

@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: UUID = Path(..., description="Notification ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    return await service.mark_notification_read(notification_id, current_user)

# ===== BY ID =====

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID = Path(..., description="User ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Account by id (admin, or the user themself)"""
    service = UsersService(db)
    return await service.get_user(user_id, current_user)

@router.put("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    data: AdminUserUpdate,
    user_id: UUID = Path(..., description="User ID"),
    current_user = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """Update names, phone, role or activation (admin)"""
    service = UsersService(db)
    user = await service.update_user(user_id, data, current_user)
    return {"message": "User updated successfully", "user": user}
