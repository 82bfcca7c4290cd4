# app/modules/payments/repository.py
from sqlalchemy.orm import Session
from typing import Any, Dict, Optional
from uuid import UUID

from app.config.constants import PaymentStatus
from app.shared.database.models import Payment, Shipment

class PaymentsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_shipment(self, shipment_id: UUID) -> Optional[Shipment]:
        return self.db.query(Shipment).filter(Shipment.id == shipment_id).first()

    def get_by_session_id(self, session_id: str) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.stripe_session_id == session_id).first()

    def get_by_reference(self, reference: str) -> Optional[Payment]:
        return self.db.query(Payment).filter(Payment.reference == reference).first()

    def get_latest_pending(self, shipment_id: UUID, provider: str) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter(
                Payment.shipment_id == shipment_id,
                Payment.provider == provider,
                Payment.status == PaymentStatus.PENDING.value
            )
            .order_by(Payment.created_at.desc())
            .first()
        )

    def get_succeeded(self, shipment_id: UUID) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.shipment_id == shipment_id, Payment.status == PaymentStatus.SUCCEEDED.value)
            .order_by(Payment.updated_at.desc())
            .first()
        )

    def create(self, data: Dict[str, Any]) -> Payment:
        payment = Payment(**data)
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)
        return payment

    def mark_failed(self, payment: Payment) -> Payment:
        payment.status = PaymentStatus.FAILED.value
        self.db.commit()
        self.db.refresh(payment)
        return payment
