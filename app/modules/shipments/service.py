# app/modules/shipments/service.py
from typing import Any, Dict, List, Optional
from uuid import UUID
from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session
import logging

from app.config.constants import FINAL_SHIPMENT_STATUSES, ShipmentPaymentStatus, ShipmentStatus
from app.core.auth.dependencies import can_access_user, is_admin
from app.modules.pricing.service import PricingService
from app.shared.database.models import Driver, Shipment, ShipmentDocument, User
from app.shared.services.cloudinary_service import cloudinary_service
from app.shared.services.shipment_events import ShipmentEventService
from app.shared.utils.helpers import pagination_meta, parse_pagination
from .repository import ShipmentsRepository
from .schemas import AddressInput, ShipmentCreate, ShipmentUpdate
from .utils import calculate_eta, format_address, generate_tracking_number

logger = logging.getLogger(__name__)

# Fields a driver may send when updating an assigned shipment
DRIVER_UPDATABLE_FIELDS = {"status", "location", "status_description"}

PLAIN_UPDATABLE_FIELDS = (
    "receiver_name", "receiver_email", "receiver_phone", "description",
    "dimensions", "declared_value", "package_type", "service_type",
)

def driver_profile_id(user: User) -> Optional[UUID]:
    profile = user.driver_profile
    return profile.id if profile else None

def can_read_shipment(shipment: Shipment, user: User) -> bool:
    """Admins read everything, drivers their assigned shipments, senders their own"""
    if is_admin(user):
        return True
    if shipment.sender_id == user.id:
        return True
    if user.role == "driver":
        profile_id = driver_profile_id(user)
        return profile_id is not None and shipment.driver_id == profile_id
    return False

class ShipmentsService:
    def __init__(self, db: Session):
        self.db = db
        self.repository = ShipmentsRepository(db)

    def get_readable_shipment(self, shipment_id: UUID, current_user: User, detail: bool = False) -> Shipment:
        """404 when missing, 403 when the caller may not read it"""
        shipment = (
            self.repository.get_detail(shipment_id) if detail
            else self.repository.get_by_id(shipment_id)
        )
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        if not can_read_shipment(shipment, current_user):
            raise HTTPException(status_code=403, detail="You do not have permission to view this shipment")
        return shipment

    def _get_owned_shipment(self, shipment_id: UUID, current_user: User, action: str) -> Shipment:
        shipment = self.repository.get_by_id(shipment_id)
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")
        if shipment.sender_id != current_user.id and not is_admin(current_user):
            raise HTTPException(status_code=403, detail=f"You can only {action} your own shipments")
        return shipment

    async def create_shipment(self, data: ShipmentCreate, current_user: User) -> Shipment:
        """Book a shipment: tracking number, ETA, fee and the first tracking event"""
        payload = data.model_dump()
        tracking_number = generate_tracking_number()

        # No geocoding: distance is 0 km at booking time
        shipping_fee = round(PricingService(self.db).calculate_fee(data.service_type, data.weight, 0), 2)

        payload.update({
            "sender_id": current_user.id,
            "tracking_number": tracking_number,
            "status": ShipmentStatus.PENDING.value,
            "payment_status": ShipmentPaymentStatus.UNPAID.value,
            "estimated_delivery": calculate_eta(data.service_type),
            "shipping_fee": shipping_fee
        })

        shipment = self.repository.create(payload)
        ShipmentEventService.append_tracking_event(
            self.db,
            shipment,
            ShipmentStatus.PENDING.value,
            location=shipment.origin,
            description="Shipment created and pending pickup"
        )
        shipment = self.repository.save(shipment)

        logger.info(f"📦 Shipment {tracking_number} created by {current_user.email} (fee {shipping_fee})")
        return shipment

    async def list_shipments(
        self,
        current_user: User,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        user_id: Optional[UUID] = None
    ) -> Dict[str, Any]:
        pagination = parse_pagination(page, limit)
        sender_id = user_id
        driver_id = None

        if current_user.role == "driver":
            driver_id = driver_profile_id(current_user)
            if driver_id is None:
                return {"shipments": [], **pagination_meta(0, pagination["page"], pagination["limit"])}
            sender_id = None
        elif not is_admin(current_user):
            sender_id = current_user.id

        shipments, total = self.repository.list_shipments(
            offset=pagination["offset"],
            limit=pagination["limit"],
            status=status,
            search=search,
            sender_id=sender_id,
            driver_id=driver_id
        )
        return {"shipments": shipments, **pagination_meta(total, pagination["page"], pagination["limit"])}

    async def get_shipment(self, shipment_id: UUID, current_user: User) -> Shipment:
        return self.get_readable_shipment(shipment_id, current_user, detail=True)

    def _authorize_update(self, shipment: Shipment, data: ShipmentUpdate, current_user: User) -> None:
        fields = data.model_fields_set

        if current_user.role == "user":
            if shipment.sender_id != current_user.id:
                raise HTTPException(status_code=403, detail="You can only update your own shipments")
            if shipment.status != ShipmentStatus.PENDING.value:
                raise HTTPException(status_code=400, detail="Only pending shipments can be modified by users")
            if data.status is not None:
                raise HTTPException(status_code=403, detail="Only staff can change the shipment status")
            if data.driver_id is not None:
                raise HTTPException(status_code=403, detail="Only administrators can assign drivers")

        elif current_user.role == "driver":
            profile_id = driver_profile_id(current_user)
            if profile_id is None or shipment.driver_id != profile_id:
                raise HTTPException(status_code=403, detail="You can only update shipments assigned to you")
            if fields - DRIVER_UPDATABLE_FIELDS:
                raise HTTPException(status_code=403, detail="Drivers can only update the shipment status")

    def _collect_updates(self, shipment: Shipment, data: ShipmentUpdate) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}

        for field in PLAIN_UPDATABLE_FIELDS:
            value = getattr(data, field)
            if value is not None:
                updates[field] = value

        weight = data.weight if data.weight is not None else data.cargo_weight_kg
        if weight is not None:
            updates["weight"] = weight

        for field in ("origin", "destination"):
            value = getattr(data, field)
            if isinstance(value, AddressInput):
                value = format_address(value.model_dump())
            elif value is not None:
                value = format_address(value)
            if value:
                updates[field] = value

        special_instructions = data.special_instructions or data.notes
        if special_instructions:
            updates["special_instructions"] = special_instructions

        if data.driver_id is not None:
            driver = self.db.query(Driver).filter(Driver.id == data.driver_id).first()
            if not driver:
                raise HTTPException(status_code=404, detail="Driver not found")
            updates["driver_id"] = driver.id

        # Pricing inputs changed: quote again, and move the ETA with the service type
        if "weight" in updates or "service_type" in updates:
            new_weight = updates.get("weight", shipment.weight)
            new_service_type = updates.get("service_type", shipment.service_type)
            updates["shipping_fee"] = round(PricingService(self.db).calculate_fee(new_service_type, new_weight, 0), 2)
            if "service_type" in updates:
                updates["estimated_delivery"] = calculate_eta(new_service_type)

        return updates

    async def update_shipment(self, shipment_id: UUID, data: ShipmentUpdate, current_user: User) -> Shipment:
        shipment = self.repository.get_by_id(shipment_id)
        if not shipment:
            raise HTTPException(status_code=404, detail="Shipment not found")

        self._authorize_update(shipment, data, current_user)

        updates = self._collect_updates(shipment, data)
        self.repository.apply_updates(shipment, updates)

        if data.status is not None and data.status != shipment.status:
            previous_status = shipment.status
            ShipmentEventService.apply_status(shipment, data.status)
            ShipmentEventService.append_tracking_event(
                self.db,
                shipment,
                data.status,
                location=data.location or shipment.destination,
                description=data.status_description or f"Status updated to {data.status}"
            )
            ShipmentEventService.notify_user(
                self.db,
                shipment.sender_id,
                title="Shipment update",
                message=f"Shipment {shipment.tracking_number} is now {data.status.replace('_', ' ')}.",
                type="success" if data.status == ShipmentStatus.DELIVERED.value else "info",
                link=f"/user/shipments/{shipment.id}"
            )
            logger.info(
                f"🚚 Shipment {shipment.tracking_number}: {previous_status} -> {data.status} "
                f"by {current_user.role} {current_user.email}"
            )

        shipment = self.repository.save(shipment)
        return shipment

    async def delete_shipment(self, shipment_id: UUID, current_user: User) -> None:
        shipment = self._get_owned_shipment(shipment_id, current_user, "delete")

        if shipment.status != ShipmentStatus.PENDING.value:
            raise HTTPException(status_code=400, detail="Only pending shipments can be deleted")

        self.repository.delete(shipment)
        logger.info(f"🗑️ Shipment {shipment.tracking_number} deleted by {current_user.email}")

    async def cancel_shipment(self, shipment_id: UUID, reason: Optional[str], current_user: User) -> Shipment:
        shipment = self._get_owned_shipment(shipment_id, current_user, "cancel")

        if shipment.status in FINAL_SHIPMENT_STATUSES:
            raise HTTPException(status_code=400, detail="This shipment cannot be cancelled")

        shipment.status = ShipmentStatus.CANCELLED.value
        shipment.cancellation_reason = reason
        ShipmentEventService.append_tracking_event(
            self.db,
            shipment,
            ShipmentStatus.CANCELLED.value,
            description=f"Shipment cancelled: {reason or 'No reason provided'}"
        )
        shipment = self.repository.save(shipment)

        logger.info(f"🚫 Shipment {shipment.tracking_number} cancelled by {current_user.email}")
        return shipment

    def _status_stats(self, sender_id: Optional[UUID] = None) -> Dict[str, int]:
        counts = self.repository.count_by_status(sender_id)
        return {
            "total": sum(counts.values()),
            "pending": counts.get(ShipmentStatus.PENDING.value, 0),
            "in_transit": counts.get(ShipmentStatus.IN_TRANSIT.value, 0),
            "delivered": counts.get(ShipmentStatus.DELIVERED.value, 0),
            "cancelled": counts.get(ShipmentStatus.CANCELLED.value, 0)
        }

    async def get_stats(self) -> Dict[str, int]:
        return self._status_stats()

    async def get_user_shipments(
        self,
        user_id: UUID,
        current_user: User,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        if not can_access_user(current_user, user_id):
            raise HTTPException(status_code=403, detail="You can only view your own shipments")

        pagination = parse_pagination(page, limit)
        shipments, total = self.repository.list_shipments(
            offset=pagination["offset"],
            limit=pagination["limit"],
            sender_id=user_id
        )
        return {"shipments": shipments, **pagination_meta(total, pagination["page"], pagination["limit"])}

    async def get_user_shipment_stats(self, user_id: UUID, current_user: User) -> Dict[str, int]:
        if not can_access_user(current_user, user_id):
            raise HTTPException(status_code=403, detail="You can only view your own shipments")

        stats = self._status_stats(user_id)
        stats["active"] = stats["pending"] + stats["in_transit"]
        return stats

    async def get_documents(self, shipment_id: UUID, current_user: User) -> List[ShipmentDocument]:
        self.get_readable_shipment(shipment_id, current_user)
        return self.repository.get_documents(shipment_id)

    async def upload_document(
        self,
        shipment_id: UUID,
        name: str,
        document_type: Optional[str],
        file: UploadFile,
        current_user: User
    ) -> ShipmentDocument:
        shipment = self.get_readable_shipment(shipment_id, current_user)

        url = await cloudinary_service.upload_shipment_document(file, shipment.tracking_number, current_user.id)
        document = self.repository.create_document(shipment.id, name, document_type, url)

        logger.info(f"📎 Document '{name}' attached to {shipment.tracking_number}")
        return document
