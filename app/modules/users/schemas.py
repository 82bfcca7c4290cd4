# app/modules/users/schemas.py
from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from app.config.constants import USER_ROLES
from app.core.auth.schemas import UserResponse
from app.shared.schemas.common import PaginatedResponse

def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Name cannot be empty")
    return value

# ===== USERS =====

class UserListResponse(PaginatedResponse):
    users: List[UserResponse]

class ProfileStats(BaseModel):
    shipments: int = 0
    volume: float = 0.0
    rating: float = 5.0

class ProfileResponse(UserResponse):
    stats: ProfileStats

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    phone: Optional[str] = None

    @validator('first_name', 'last_name')
    def check_names(cls, v):
        return _strip_name(v)

    class Config:
        populate_by_name = True

class AdminUserUpdate(ProfileUpdate):
    role: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    @validator('role')
    def check_role(cls, v):
        if v is not None and v not in USER_ROLES:
            raise ValueError(f"Invalid role. Must be one of: {', '.join(USER_ROLES)}")
        return v

class UserMutationResponse(BaseModel):
    message: str
    user: UserResponse

# ===== ADDRESSES =====

class AddressCreate(BaseModel):
    label: Optional[str] = None
    street: str = Field(..., min_length=1)
    city: str = "Lagos"
    state: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")
    country: str = "Nigeria"
    is_default: bool = Field(False, alias="isDefault")
    contact_name: Optional[str] = Field(None, alias="contactName")
    phone: Optional[str] = None

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "label": "Warehouse",
                "street": "14 Creek Road",
                "city": "Lagos",
                "state": "Lagos",
                "isDefault": True
            }
        }

class AddressUpdate(BaseModel):
    label: Optional[str] = None
    street: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = None
    postal_code: Optional[str] = Field(None, alias="postalCode")
    country: Optional[str] = None
    is_default: Optional[bool] = Field(None, alias="isDefault")
    contact_name: Optional[str] = Field(None, alias="contactName")
    phone: Optional[str] = None

    class Config:
        populate_by_name = True

class AddressResponse(BaseModel):
    id: UUID
    label: Optional[str] = None
    street: str
    city: str
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_default: bool
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

# ===== NOTIFICATIONS =====

class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    type: str
    link: Optional[str] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class NotificationListResponse(PaginatedResponse):
    notifications: List[NotificationResponse]
    unread_count: int
