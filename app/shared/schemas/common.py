# app/shared/schemas/common.py
from pydantic import BaseModel
from typing import Optional
from uuid import UUID

class PaginatedResponse(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_more: bool

class PersonSummary(BaseModel):
    """Compact view of a user embedded in other resources"""
    id: UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True
