# app/modules/users/service.py
from typing import Any, Dict, List, Optional
from uuid import UUID
from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session
import logging

from app.core.auth.dependencies import can_access_user
from app.core.auth.schemas import ChangePasswordRequest, UserResponse
from app.core.auth.service import AuthService
from app.shared.database.models import Address, Notification, User
from app.shared.services.cloudinary_service import cloudinary_service
from app.shared.utils.helpers import pagination_meta, parse_pagination
from .repository import UsersRepository, AddressesRepository, NotificationsRepository
from .schemas import (
    ProfileUpdate, AdminUserUpdate, ProfileResponse, ProfileStats, AddressCreate, AddressUpdate
)

logger = logging.getLogger(__name__)

class UsersService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = UsersRepository(db)
        self.notifications = NotificationsRepository(db)

    async def list_users(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        role: Optional[str] = None
    ) -> Dict[str, Any]:
        pagination = parse_pagination(page, limit)
        users, total = self.repository.list_users(
            pagination["offset"], pagination["limit"], search=search, role=role
        )
        return {"users": users, **pagination_meta(total, pagination["page"], pagination["limit"])}

    async def get_profile(self, current_user: User) -> ProfileResponse:
        """Account plus booking totals"""
        shipments, volume = self.repository.get_shipment_totals(current_user.id)
        user_data = UserResponse.model_validate(current_user).model_dump()
        return ProfileResponse(
            **user_data,
            stats=ProfileStats(shipments=shipments, volume=volume, rating=5.0)
        )

    async def update_profile(self, current_user: User, data: ProfileUpdate) -> User:
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        return self.repository.update(current_user, updates)

    async def update_avatar(self, current_user: User, image: UploadFile) -> User:
        previous_url = current_user.avatar_url
        url = await cloudinary_service.upload_avatar(image, current_user.id)
        user = self.repository.update(current_user, {"avatar_url": url})

        if previous_url:
            cloudinary_service.delete_file(previous_url)
        logger.info(f"🖼️ Avatar updated for {user.email}")
        return user

    async def change_password(self, current_user: User, data: ChangePasswordRequest) -> None:
        if not AuthService.verify_password(data.current_password, current_user.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect")

        self.repository.update(current_user, {
            "password_hash": AuthService.get_password_hash(data.new_password)
        })
        logger.info(f"🔑 Password changed for {current_user.email}")

    async def get_user(self, user_id: UUID, current_user: User) -> User:
        if not can_access_user(current_user, user_id):
            raise HTTPException(status_code=403, detail="You can only view your own account")

        user = self.repository.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    async def update_user(self, user_id: UUID, data: AdminUserUpdate, current_user: User) -> User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        if user.id == current_user.id and (
            updates.get("is_active") is False or updates.get("role", "admin") != "admin"
        ):
            raise HTTPException(status_code=400, detail="You cannot deactivate or demote your own account")

        user = self.repository.update(user, updates)
        logger.info(f"✏️ User {user.email} updated by {current_user.email}: {sorted(updates)}")
        return user

    # ===== NOTIFICATIONS =====

    async def get_notifications(
        self,
        current_user: User,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        unread_only: bool = False
    ) -> Dict[str, Any]:
        pagination = parse_pagination(page, limit)
        notifications, total = self.notifications.list_for_user(
            current_user.id, pagination["offset"], pagination["limit"], unread_only=unread_only
        )
        return {
            "notifications": notifications,
            "unread_count": self.notifications.count_unread(current_user.id),
            **pagination_meta(total, pagination["page"], pagination["limit"])
        }

    async def mark_notification_read(self, notification_id: UUID, current_user: User) -> Notification:
        notification = self.notifications.get_owned(notification_id, current_user.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return self.notifications.mark_read(notification)

class AddressesService:
    """Saved addresses; each user only ever sees their own"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = AddressesRepository(db)

    def _get_owned(self, address_id: UUID, current_user: User) -> Address:
        address = self.repository.get_owned(address_id, current_user.id)
        if not address:
            raise HTTPException(status_code=404, detail="Address not found")
        return address

    async def get_addresses(self, current_user: User) -> List[Address]:
        return self.repository.get_for_user(current_user.id)

    async def add_address(self, data: AddressCreate, current_user: User) -> Address:
        if data.is_default:
            self.repository.clear_default(current_user.id)

        payload = data.model_dump()
        payload["user_id"] = current_user.id
        return self.repository.create(payload)

    async def update_address(self, address_id: UUID, data: AddressUpdate, current_user: User) -> Address:
        address = self._get_owned(address_id, current_user)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)

        if updates.get("is_default"):
            self.repository.clear_default(current_user.id)
        for field, value in updates.items():
            setattr(address, field, value)
        return self.repository.save(address)

    async def set_default(self, address_id: UUID, current_user: User) -> Address:
        address = self._get_owned(address_id, current_user)
        self.repository.clear_default(current_user.id)
        address.is_default = True
        return self.repository.save(address)

    async def delete_address(self, address_id: UUID, current_user: User) -> None:
        address = self._get_owned(address_id, current_user)
        self.repository.delete(address)
