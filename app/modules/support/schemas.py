# app/modules/support/schemas.py
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Dict, List, Optional
from datetime import datetime
from uuid import UUID

from app.config.constants import TICKET_CATEGORIES, TICKET_PRIORITIES
from app.shared.schemas.common import PaginatedResponse

# ===== TICKETS =====

class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    category: str = "general"
    priority: str = "medium"
    shipment_id: Optional[UUID] = Field(None, alias="shipmentId")

    @validator('category')
    def check_category(cls, v):
        v = (v or "general").lower()
        if v not in TICKET_CATEGORIES:
            raise ValueError(f"Invalid category. Must be one of: {', '.join(TICKET_CATEGORIES)}")
        return v

    @validator('priority')
    def check_priority(cls, v):
        v = (v or "medium").lower()
        if v not in TICKET_PRIORITIES:
            raise ValueError(f"Invalid priority. Must be one of: {', '.join(TICKET_PRIORITIES)}")
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "subject": "Package arrived damaged",
                "message": "The box was crushed on one side.",
                "category": "complaint",
                "priority": "high"
            }
        }

class TicketReplyCreate(BaseModel):
    message: str = Field(..., min_length=1)

class TicketReplyResponse(BaseModel):
    id: UUID
    ticket_id: UUID
    user_id: Optional[UUID] = None
    message: str
    is_staff: bool
    created_at: datetime

    class Config:
        from_attributes = True

class TicketResponse(BaseModel):
    id: UUID
    user_id: UUID
    shipment_id: Optional[UUID] = None
    subject: str
    message: str
    category: str
    priority: str
    status: str
    closed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TicketDetailResponse(TicketResponse):
    replies: List[TicketReplyResponse] = []

class TicketListResponse(PaginatedResponse):
    tickets: List[TicketResponse]

class TicketMutationResponse(BaseModel):
    message: str
    ticket: TicketResponse

class TicketReplyMutationResponse(BaseModel):
    message: str
    reply: TicketReplyResponse

# ===== FAQS / CONTACT =====

class FAQResponse(BaseModel):
    id: UUID
    question: str
    answer: str
    category: str
    order_index: int

    class Config:
        from_attributes = True

class ContactInfoResponse(BaseModel):
    email: str
    phone: str
    address: str
    hours: Dict[str, str]
    social: Dict[str, str]

class ContactFormRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    subject: Optional[str] = Field(None, max_length=255)
    message: str = Field(..., min_length=1)

# ===== LIVE CHAT =====

class ChatStartResponse(BaseModel):
    session_id: UUID = Field(..., alias="sessionId")
    agent_name: str = Field("Support Team", alias="agentName")
    message: str

    class Config:
        populate_by_name = True

class ChatMessageCreate(BaseModel):
    message: str = Field(..., min_length=1)

class ChatMessageResponse(BaseModel):
    id: UUID
    session_id: UUID
    sender_id: Optional[UUID] = None
    message: str
    is_from_user: bool
    created_at: datetime

    class Config:
        from_attributes = True

class ChatMessageSentResponse(BaseModel):
    message: str
    data: ChatMessageResponse
