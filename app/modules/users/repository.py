# app/modules/users/repository.py
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from app.shared.database.models import Address, Notification, Shipment, User

class UsersRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def list_users(
        self,
        offset: int,
        limit: int,
        search: Optional[str] = None,
        role: Optional[str] = None
    ) -> Tuple[List[User], int]:
        query = self.db.query(User)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern)
            ))
        if role:
            query = query.filter(User.role == role)

        total = query.count()
        users = query.order_by(User.created_at.desc()).offset(offset).limit(limit).all()
        return users, total

    def get_shipment_totals(self, user_id: UUID) -> Tuple[int, float]:
        """(shipment count, sum of shipping fees) of a sender"""
        count, volume = (
            self.db.query(func.count(Shipment.id), func.coalesce(func.sum(Shipment.shipping_fee), 0))
            .filter(Shipment.sender_id == user_id)
            .one()
        )
        return count or 0, float(volume or 0)

    def update(self, user: User, updates: Dict[str, Any]) -> User:
        for field, value in updates.items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

class AddressesRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, user_id: UUID) -> List[Address]:
        return (
            self.db.query(Address)
            .filter(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.asc())
            .all()
        )

    def get_owned(self, address_id: UUID, user_id: UUID) -> Optional[Address]:
        return (
            self.db.query(Address)
            .filter(Address.id == address_id, Address.user_id == user_id)
            .first()
        )

    def clear_default(self, user_id: UUID) -> None:
        self.db.query(Address).filter(
            Address.user_id == user_id, Address.is_default.is_(True)
        ).update({Address.is_default: False}, synchronize_session="fetch")

    def create(self, data: Dict[str, Any]) -> Address:
        address = Address(**data)
        self.db.add(address)
        self.db.commit()
        self.db.refresh(address)
        return address

    def save(self, address: Address) -> Address:
        self.db.commit()
        self.db.refresh(address)
        return address

    def delete(self, address: Address) -> None:
        self.db.delete(address)
        self.db.commit()

class NotificationsRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(
        self,
        user_id: UUID,
        offset: int,
        limit: int,
        unread_only: bool = False
    ) -> Tuple[List[Notification], int]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))

        total = query.count()
        notifications = query.order_by(Notification.created_at.desc()).offset(offset).limit(limit).all()
        return notifications, total

    def count_unread(self, user_id: UUID) -> int:
        return (
            self.db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .scalar()
        ) or 0

    def get_owned(self, notification_id: UUID, user_id: UUID) -> Optional[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification
