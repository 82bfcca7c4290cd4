# app/shared/services/shipment_events.py
from typing import Optional
from sqlalchemy.orm import Session
import logging

from app.config.constants import PaymentStatus, ShipmentPaymentStatus, ShipmentStatus
from app.shared.database.models import Notification, Payment, Shipment, TrackingEvent
from app.shared.utils.helpers import utcnow

logger = logging.getLogger(__name__)

PAYMENT_VERIFIED_DESCRIPTION = "Payment verified. Shipment moved to processing."


class ShipmentEventService:
    """Side effects shared by every flow that moves a shipment forward.

    The event and notification helpers only add to the session; callers
    commit the shipment change, its tracking event and the notification
    together.
    """

    @staticmethod
    def append_tracking_event(
        db: Session,
        shipment: Shipment,
        status: str,
        location: Optional[str] = None,
        description: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None
    ) -> TrackingEvent:
        event = TrackingEvent(
            shipment_id=shipment.id,
            status=status,
            location=location,
            description=description,
            lat=lat,
            lng=lng
        )
        db.add(event)
        return event

    @staticmethod
    def notify_user(
        db: Session,
        user_id,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Optional[Notification]:
        if user_id is None:
            return None
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link
        )
        db.add(notification)
        return notification

    @staticmethod
    def apply_status(shipment: Shipment, new_status: str) -> None:
        """Set the status and the milestone timestamps it implies"""
        now = utcnow()
        if new_status == ShipmentStatus.IN_TRANSIT.value and shipment.picked_up_at is None:
            shipment.picked_up_at = now
        if new_status == ShipmentStatus.DELIVERED.value:
            shipment.delivered_at = now
        shipment.status = new_status

    @staticmethod
    def mark_payment_succeeded(
        db: Session,
        payment: Payment,
        description: str = PAYMENT_VERIFIED_DESCRIPTION,
        payment_intent_id: Optional[str] = None
    ) -> bool:
        """
        Payment -> succeeded, shipment -> paid + processing, one tracking event.

        Returns False when the payment was already settled, so a provider
        retrying the same notification does not append a second event.
        """
        if payment.status == PaymentStatus.SUCCEEDED.value:
            logger.info(f"ℹ️ Payment {payment.id} already settled, skipping")
            return False

        payment.status = PaymentStatus.SUCCEEDED.value
        if payment_intent_id:
            payment.stripe_payment_intent_id = payment_intent_id

        shipment = payment.shipment
        shipment.payment_status = ShipmentPaymentStatus.PAID.value
        ShipmentEventService.apply_status(shipment, ShipmentStatus.PROCESSING.value)

        ShipmentEventService.append_tracking_event(
            db, shipment, ShipmentStatus.PROCESSING.value, location="System", description=description
        )
        ShipmentEventService.notify_user(
            db,
            shipment.sender_id,
            title="Payment received",
            message=f"Payment for shipment {shipment.tracking_number} was confirmed.",
            type="success",
            link=f"/user/shipments/{shipment.id}"
        )
        db.commit()

        logger.info(f"💰 Payment {payment.id} settled, shipment {shipment.tracking_number} is processing")
        return True
