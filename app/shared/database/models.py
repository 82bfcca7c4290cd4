# app/shared/database/models.py
import uuid

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Text, Integer,
    Numeric, ForeignKey, JSON, Uuid, func
)
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB

from app.config.database import Base
from app.shared.utils.helpers import utcnow

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


# =====================================================
# MIXINS
# =====================================================
class UUIDPrimaryKeyMixin:
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """Adds created_at and updated_at columns"""
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.current_timestamp())
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.current_timestamp())


class CreatedAtMixin:
    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.current_timestamp())


# =====================================================
# USERS
# =====================================================

class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Account of a customer, driver or administrator"""
    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255))
    last_name = Column(String(255))
    company_name = Column(String(255))
    client_category = Column(String(100))
    phone = Column(String(50))
    avatar_url = Column(Text)
    role = Column(String(20), nullable=False, default="user")
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    shipments = relationship("Shipment", back_populates="sender", foreign_keys="Shipment.sender_id")
    driver_profile = relationship("Driver", back_populates="user", uselist=False)
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Address(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "addresses"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(100))
    street = Column(Text, nullable=False)
    city = Column(String(100), nullable=False, default="Lagos")
    state = Column(String(100))
    postal_code = Column(String(20))
    country = Column(String(100), default="Nigeria")
    is_default = Column(Boolean, nullable=False, default=False)
    contact_name = Column(String(255))
    phone = Column(String(50))

    user = relationship("User", back_populates="addresses")


class Notification(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "notifications"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")
    link = Column(Text)
    is_read = Column(Boolean, nullable=False, default=False, index=True)

    user = relationship("User", back_populates="notifications")


class AuthAuditLog(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Password reset requests and outcomes"""
    __tablename__ = "auth_audit_log"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    email = Column(String(255), index=True)
    event_type = Column(String(50), nullable=False, index=True)
    ip_address = Column(String(100))
    user_agent = Column(Text)
    metadata_ = Column("metadata", JSONType, default=dict)


# =====================================================
# FLEET
# =====================================================

class Vehicle(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vehicles"

    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer)
    plate_number = Column(String(50), unique=True, nullable=False)
    type = Column(String(20), nullable=False, default="van")
    capacity_kg = Column(Numeric(10, 2))
    is_active = Column(Boolean, nullable=False, default=True)
    is_assigned = Column(Boolean, nullable=False, default=False)
    assigned_driver_id = Column(Uuid, ForeignKey("drivers.id", ondelete="SET NULL", use_alter=True, name="fk_vehicle_driver"))
    last_maintenance = Column(DateTime)


class Driver(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "drivers"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    license_number = Column(String(100), unique=True, nullable=False)
    license_expiry = Column(Date)
    vehicle_id = Column(Uuid, ForeignKey("vehicles.id"))
    status = Column(String(20), nullable=False, default="active", index=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime)
    suspension_reason = Column(Text)
    suspended_at = Column(DateTime)
    current_lat = Column(Numeric(10, 8))
    current_lng = Column(Numeric(11, 8))
    last_location_update = Column(DateTime)
    rating = Column(Numeric(3, 2), default=5.00)
    total_deliveries = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="driver_profile")
    vehicle = relationship("Vehicle", foreign_keys=[vehicle_id])
    routes = relationship("DriverRoute", back_populates="driver", cascade="all, delete-orphan")

    @property
    def profile(self):
        return self.user


class DriverRoute(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "driver_routes"

    driver_id = Column(Uuid, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True)
    shipment_ids = Column(JSONType, default=list)
    waypoints = Column(JSONType)
    is_active = Column(Boolean, nullable=False, default=True)
    started_at = Column(DateTime)
    completed_at = Column(DateTime)

    driver = relationship("Driver", back_populates="routes")


# =====================================================
# SHIPMENTS
# =====================================================

class Shipment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "shipments"

    tracking_number = Column(String(50), unique=True, nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"), index=True)
    driver_id = Column(Uuid, ForeignKey("drivers.id"), index=True)

    # Route
    origin = Column(Text, nullable=False, default="Lagos")
    origin_lat = Column(Numeric(10, 8))
    origin_lng = Column(Numeric(11, 8))
    destination = Column(Text, nullable=False)
    destination_lat = Column(Numeric(10, 8))
    destination_lng = Column(Numeric(11, 8))

    # Receiver
    receiver_name = Column(String(255), nullable=False)
    receiver_email = Column(String(255))
    receiver_phone = Column(String(50))

    # Package
    weight = Column(Numeric(10, 2))
    dimensions = Column(JSONType)
    description = Column(Text)
    declared_value = Column(Numeric(12, 2))
    special_instructions = Column(Text)
    service_type = Column(String(50), nullable=False, default="5 tons")
    package_type = Column(String(50), nullable=False, default="parcel")

    # Status
    status = Column(String(30), nullable=False, default="pending", index=True)
    payment_status = Column(String(20), nullable=False, default="unpaid")

    # Dates
    estimated_delivery = Column(DateTime)
    picked_up_at = Column(DateTime)
    delivered_at = Column(DateTime)

    cancellation_reason = Column(Text)
    shipping_fee = Column(Numeric(12, 2))

    # Relationships
    sender = relationship("User", back_populates="shipments", foreign_keys=[sender_id])
    driver = relationship("Driver", foreign_keys=[driver_id])
    tracking_events = relationship(
        "TrackingEvent", back_populates="shipment",
        cascade="all, delete-orphan", order_by="TrackingEvent.created_at"
    )
    payments = relationship("Payment", back_populates="shipment", cascade="all, delete-orphan")
    documents = relationship("ShipmentDocument", back_populates="shipment", cascade="all, delete-orphan")


class TrackingEvent(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    """Append-only status/location record of a shipment"""
    __tablename__ = "tracking_events"

    shipment_id = Column(Uuid, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(30), nullable=False)
    location = Column(Text)
    lat = Column(Numeric(10, 8))
    lng = Column(Numeric(11, 8))
    description = Column(Text)

    shipment = relationship("Shipment", back_populates="tracking_events")


class ShipmentDocument(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "shipment_documents"

    shipment_id = Column(Uuid, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(50))
    url = Column(Text, nullable=False)

    shipment = relationship("Shipment", back_populates="documents")


class PricingConfig(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "pricing_configs"

    service_type = Column(String(50), unique=True, nullable=False)
    base_price = Column(Numeric(12, 2), nullable=False, default=0)
    price_per_kg = Column(Numeric(10, 2), nullable=False, default=0)
    price_per_km = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


# =====================================================
# PAYMENTS
# =====================================================

class Payment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "payments"

    shipment_id = Column(Uuid, ForeignKey("shipments.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="NGN")
    provider = Column(String(20), nullable=False, default="stripe")
    status = Column(String(20), nullable=False, default="pending")
    stripe_session_id = Column(String(255), index=True)
    stripe_payment_intent_id = Column(String(255))
    reference = Column(String(255), index=True)
    paystack_reference = Column(String(255))

    shipment = relationship("Shipment", back_populates="payments")


# =====================================================
# SUPPORT
# =====================================================

class SupportTicket(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "support_tickets"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shipment_id = Column(Uuid, ForeignKey("shipments.id", ondelete="SET NULL"))
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, default="general")
    priority = Column(String(20), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default="open", index=True)
    assigned_to = Column(Uuid, ForeignKey("users.id"))
    closed_at = Column(DateTime)

    replies = relationship(
        "TicketReply", back_populates="ticket",
        cascade="all, delete-orphan", order_by="TicketReply.created_at"
    )


class TicketReply(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "ticket_replies"

    ticket_id = Column(Uuid, ForeignKey("support_tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"))
    message = Column(Text, nullable=False)
    is_staff = Column(Boolean, nullable=False, default=False)

    ticket = relationship("SupportTicket", back_populates="replies")


class FAQ(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "faqs"

    question = Column(Text, unique=True, nullable=False)
    answer = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, default="general")
    order_index = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)


class ContactSubmission(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "contact_submissions"

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    subject = Column(String(255))
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)


class ChatSession(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "chat_sessions"

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    agent_id = Column(Uuid, ForeignKey("users.id"))
    status = Column(String(20), nullable=False, default="active")
    closed_at = Column(DateTime)

    messages = relationship(
        "ChatMessage", back_populates="session",
        cascade="all, delete-orphan", order_by="ChatMessage.created_at"
    )


class ChatMessage(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "chat_messages"

    session_id = Column(Uuid, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id = Column(Uuid, ForeignKey("users.id"))
    message = Column(Text, nullable=False)
    is_from_user = Column(Boolean, nullable=False, default=True)

    session = relationship("ChatSession", back_populates="messages")
