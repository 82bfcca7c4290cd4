# app/modules/support/router.py
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from .service import SupportService
from .schemas import (
    TicketCreate, TicketReplyCreate, TicketDetailResponse, TicketListResponse,
    TicketMutationResponse, TicketReplyMutationResponse, FAQResponse, ContactInfoResponse,
    ContactFormRequest, ChatStartResponse, ChatMessageCreate, ChatMessageResponse,
    ChatMessageSentResponse
)

router = APIRouter()

@router.get("/health")
async def support_health():
    """Health check of the support module"""
    return {
        "service": "support",
        "status": "healthy",
        "version": "1.0.0",
        "features": [
            "Support tickets",
            "FAQs",
            "Contact form",
            "Live chat"
        ]
    }

# ===== PUBLIC =====

@router.get("/faqs", response_model=List[FAQResponse])
async def get_faqs(
    category: Optional[str] = Query(None, description="FAQ category"),
    db: Session = Depends(get_db)
):
    """Published FAQs ordered by position"""
    service = SupportService(db)
    return await service.get_faqs(category)

@router.get("/faqs/search", response_model=List[FAQResponse])
async def search_faqs(
    q: Optional[str] = Query(None, description="Text searched in questions and answers"),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    return await service.search_faqs(q)

@router.get("/contact", response_model=ContactInfoResponse)
async def get_contact_info(db: Session = Depends(get_db)):
    service = SupportService(db)
    return await service.get_contact_info()

@router.post("/contact", status_code=201)
async def submit_contact_form(
    data: ContactFormRequest,
    db: Session = Depends(get_db)
):
    """Store a contact form submission"""
    service = SupportService(db)
    return await service.submit_contact_form(data)

# ===== TICKETS =====

@router.get("/tickets", response_model=TicketListResponse)
async def get_tickets(
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filter by ticket status"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Caller's tickets, newest first (administrators see all)"""
    service = SupportService(db)
    return await service.list_tickets(current_user, page=page, limit=limit, status=status)

@router.post("/tickets", response_model=TicketMutationResponse, status_code=201)
async def create_ticket(
    data: TicketCreate,
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    ticket = await service.create_ticket(data, current_user)
    return {"message": "Support ticket created successfully", "ticket": ticket}

@router.get("/tickets/{ticket_id}", response_model=TicketDetailResponse)
async def get_ticket(
    ticket_id: UUID = Path(..., description="Ticket ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ticket with its replies, oldest first"""
    service = SupportService(db)
    return await service.get_ticket(ticket_id, current_user)

@router.post("/tickets/{ticket_id}/replies", response_model=TicketReplyMutationResponse, status_code=201)
async def add_ticket_reply(
    data: TicketReplyCreate,
    ticket_id: UUID = Path(..., description="Ticket ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Reply to a ticket

    Administrator replies are flagged as staff. A reply to a closed ticket
    moves it back to in_progress.
    """
    service = SupportService(db)
    reply = await service.add_reply(ticket_id, data.message, current_user)
    return {"message": "Reply added successfully", "reply": reply}

@router.post("/tickets/{ticket_id}/close", response_model=TicketMutationResponse)
async def close_ticket(
    ticket_id: UUID = Path(..., description="Ticket ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    ticket = await service.close_ticket(ticket_id, current_user)
    return {"message": "Ticket closed successfully", "ticket": ticket}

# ===== LIVE CHAT =====

@router.post("/chat/start", response_model=ChatStartResponse)
async def start_live_chat(
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    return await service.start_chat(current_user)

@router.post("/chat/{session_id}/message", response_model=ChatMessageSentResponse)
async def send_chat_message(
    data: ChatMessageCreate,
    session_id: UUID = Path(..., description="Chat session ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    message = await service.send_chat_message(session_id, data.message, current_user)
    return {"message": "Message sent", "data": message}

@router.get("/chat/{session_id}/messages", response_model=List[ChatMessageResponse])
async def get_chat_messages(
    session_id: UUID = Path(..., description="Chat session ID"),
    current_user = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SupportService(db)
    return await service.get_chat_messages(session_id, current_user)
