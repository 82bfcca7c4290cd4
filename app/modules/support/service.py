# app/modules/support/service.py
from typing import Any, Dict, List, Optional
from uuid import UUID
from fastapi import HTTPException
from sqlalchemy.orm import Session
import logging

from app.config.constants import SUPPORT_CONTACT_INFO, TICKET_STATUSES, TicketStatus
from app.core.auth.dependencies import is_admin
from app.shared.database.models import ChatMessage, ChatSession, FAQ, SupportTicket, TicketReply, User
from app.shared.utils.helpers import pagination_meta, parse_pagination, utcnow
from .repository import SupportRepository
from .schemas import TicketCreate, ContactFormRequest

logger = logging.getLogger(__name__)

CHAT_WELCOME_MESSAGE = "A support agent will be with you shortly."
CHAT_AGENT_NAME = "Support Team"
CONTACT_THANKS_MESSAGE = "Thank you for your message. We will get back to you soon."

class SupportService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = SupportRepository(db)

    def _get_visible_ticket(self, ticket_id: UUID, current_user: User, with_replies: bool = False) -> SupportTicket:
        ticket = self.repository.get_ticket(ticket_id, with_replies=with_replies)
        if not ticket:
            raise HTTPException(status_code=404, detail="Ticket not found")
        if ticket.user_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail="You can only access your own tickets")
        return ticket

    # ===== TICKETS =====

    async def create_ticket(self, data: TicketCreate, current_user: User) -> SupportTicket:
        ticket = self.repository.create_ticket({
            "user_id": current_user.id,
            "subject": data.subject,
            "message": data.message,
            "category": data.category,
            "priority": data.priority,
            "shipment_id": data.shipment_id,
            "status": TicketStatus.OPEN.value
        })
        logger.info(f"🎫 Ticket {ticket.id} opened by {current_user.email} ({ticket.category}/{ticket.priority})")
        return ticket

    async def list_tickets(
        self,
        current_user: User,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        """Own tickets, or every ticket for administrators"""
        if status and status not in TICKET_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Must be one of: {', '.join(TICKET_STATUSES)}"
            )

        pagination = parse_pagination(page, limit)
        tickets, total = self.repository.list_tickets(
            pagination["offset"],
            pagination["limit"],
            user_id=None if is_admin(current_user) else current_user.id,
            status=status
        )
        return {"tickets": tickets, **pagination_meta(total, pagination["page"], pagination["limit"])}

    async def get_ticket(self, ticket_id: UUID, current_user: User) -> SupportTicket:
        return self._get_visible_ticket(ticket_id, current_user, with_replies=True)

    async def add_reply(self, ticket_id: UUID, message: str, current_user: User) -> TicketReply:
        """Reply to a ticket; replying to a closed ticket reopens it"""
        ticket = self._get_visible_ticket(ticket_id, current_user)

        reply = self.repository.add_reply({
            "ticket_id": ticket.id,
            "user_id": current_user.id,
            "message": message,
            "is_staff": is_admin(current_user)
        })
        if ticket.status == TicketStatus.CLOSED.value:
            ticket.status = TicketStatus.IN_PROGRESS.value
            ticket.closed_at = None
            logger.info(f"🔄 Ticket {ticket.id} reopened by a reply")

        self.db.commit()
        self.db.refresh(reply)
        return reply

    async def close_ticket(self, ticket_id: UUID, current_user: User) -> SupportTicket:
        ticket = self._get_visible_ticket(ticket_id, current_user)
        ticket.status = TicketStatus.CLOSED.value
        ticket.closed_at = utcnow()
        self.db.commit()
        self.db.refresh(ticket)
        return ticket

    # ===== FAQS / CONTACT =====

    async def get_faqs(self, category: Optional[str] = None) -> List[FAQ]:
        return self.repository.get_faqs(category)

    async def search_faqs(self, term: Optional[str]) -> List[FAQ]:
        term = (term or "").strip()
        if not term:
            return []
        return self.repository.search_faqs(term)

    async def get_contact_info(self) -> Dict[str, Any]:
        return SUPPORT_CONTACT_INFO

    async def submit_contact_form(self, data: ContactFormRequest) -> Dict[str, str]:
        submission = self.repository.create_contact_submission(data.model_dump())
        logger.info(f"📬 Contact form {submission.id} received from {submission.email}")
        return {"message": CONTACT_THANKS_MESSAGE}

    # ===== LIVE CHAT =====

    def _get_owned_session(self, session_id: UUID, current_user: User) -> ChatSession:
        session = self.repository.get_chat_session(session_id)
        if not session:
            raise HTTPException(status_code=404, detail="Chat session not found")
        if session.user_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail="You can only access your own chat sessions")
        return session

    async def start_chat(self, current_user: User) -> Dict[str, Any]:
        session = self.repository.create_chat_session(current_user.id)
        logger.info(f"💬 Chat session {session.id} started by {current_user.email}")
        return {
            "session_id": session.id,
            "agent_name": CHAT_AGENT_NAME,
            "message": CHAT_WELCOME_MESSAGE
        }

    async def send_chat_message(self, session_id: UUID, message: str, current_user: User) -> ChatMessage:
        session = self._get_owned_session(session_id, current_user)
        if session.status != "active":
            raise HTTPException(status_code=400, detail="This chat session is closed")

        return self.repository.add_chat_message({
            "session_id": session.id,
            "sender_id": current_user.id,
            "message": message,
            "is_from_user": session.user_id == current_user.id
        })

    async def get_chat_messages(self, session_id: UUID, current_user: User) -> List[ChatMessage]:
        session = self._get_owned_session(session_id, current_user)
        return self.repository.get_chat_messages(session.id)
