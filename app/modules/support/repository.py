# app/modules/support/repository.py
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from app.shared.database.models import (
    ChatMessage, ChatSession, ContactSubmission, FAQ, SupportTicket, TicketReply
)

class SupportRepository:
    def __init__(self, db: Session):
        self.db = db

    # ===== TICKETS =====

    def get_ticket(self, ticket_id: UUID, with_replies: bool = False) -> Optional[SupportTicket]:
        query = self.db.query(SupportTicket)
        if with_replies:
            query = query.options(selectinload(SupportTicket.replies))
        return query.filter(SupportTicket.id == ticket_id).first()

    def list_tickets(
        self,
        offset: int,
        limit: int,
        user_id: Optional[UUID] = None,
        status: Optional[str] = None
    ) -> Tuple[List[SupportTicket], int]:
        query = self.db.query(SupportTicket)
        if user_id:
            query = query.filter(SupportTicket.user_id == user_id)
        if status:
            query = query.filter(SupportTicket.status == status)

        total = query.count()
        tickets = query.order_by(SupportTicket.created_at.desc()).offset(offset).limit(limit).all()
        return tickets, total

    def create_ticket(self, data: Dict[str, Any]) -> SupportTicket:
        ticket = SupportTicket(**data)
        self.db.add(ticket)
        self.db.commit()
        self.db.refresh(ticket)
        return ticket

    def add_reply(self, data: Dict[str, Any]) -> TicketReply:
        reply = TicketReply(**data)
        self.db.add(reply)
        return reply

    # ===== FAQS =====

    def get_faqs(self, category: Optional[str] = None) -> List[FAQ]:
        query = self.db.query(FAQ).filter(FAQ.is_published.is_(True))
        if category:
            query = query.filter(FAQ.category == category)
        return query.order_by(FAQ.order_index.asc()).all()

    def search_faqs(self, term: str) -> List[FAQ]:
        pattern = f"%{term}%"
        return (
            self.db.query(FAQ)
            .filter(FAQ.is_published.is_(True))
            .filter(or_(FAQ.question.ilike(pattern), FAQ.answer.ilike(pattern)))
            .order_by(FAQ.order_index.asc())
            .all()
        )

    def create_contact_submission(self, data: Dict[str, Any]) -> ContactSubmission:
        submission = ContactSubmission(**data)
        self.db.add(submission)
        self.db.commit()
        self.db.refresh(submission)
        return submission

    # ===== CHAT =====

    def create_chat_session(self, user_id: UUID) -> ChatSession:
        session = ChatSession(user_id=user_id, status="active")
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get_chat_session(self, session_id: UUID) -> Optional[ChatSession]:
        return self.db.query(ChatSession).filter(ChatSession.id == session_id).first()

    def add_chat_message(self, data: Dict[str, Any]) -> ChatMessage:
        message = ChatMessage(**data)
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def get_chat_messages(self, session_id: UUID) -> List[ChatMessage]:
        return (
            self.db.query(ChatMessage)
            .filter(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc())
            .all()
        )
