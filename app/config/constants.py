# app/config/constants.py
"""
Domain constants shared by the modules: status vocabularies, roles,
pagination defaults and the static pricing / ETA tables.
"""
from enum import Enum


class ShipmentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


class ShipmentPaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    DRIVER = "driver"


class DriverStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    ON_DELIVERY = "on_delivery"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


SHIPMENT_STATUSES = [s.value for s in ShipmentStatus]
ACTIVE_SHIPMENT_STATUSES = [
    ShipmentStatus.PENDING.value,
    ShipmentStatus.PROCESSING.value,
    ShipmentStatus.IN_TRANSIT.value,
    ShipmentStatus.OUT_FOR_DELIVERY.value,
]
# Shipments in these states can no longer be cancelled
FINAL_SHIPMENT_STATUSES = [ShipmentStatus.DELIVERED.value, ShipmentStatus.CANCELLED.value]

USER_ROLES = [r.value for r in UserRole]
DRIVER_STATUSES = [s.value for s in DriverStatus]
TICKET_STATUSES = [s.value for s in TicketStatus]
TICKET_CATEGORIES = ["general", "shipping", "billing", "technical", "complaint"]
TICKET_PRIORITIES = ["low", "medium", "high", "urgent"]
VEHICLE_TYPES = ["van", "truck", "motorcycle", "car"]

# Service types accepted when booking a shipment
BOOKABLE_SERVICE_TYPES = ["5 tons", "10 tons", "15 tons"]
DEFAULT_SERVICE_TYPE = "5 tons"
DEFAULT_PACKAGE_TYPE = "parcel"

# Pagination
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# ETA offsets in days; anything else uses DEFAULT_ETA_DAYS
ETA_DAYS = {
    "express": 1,
    "priority": 2,
    "standard": 5,
    "economy": 7,
}
DEFAULT_ETA_DAYS = 5

# (base, per kg, per km) used when no active pricing config exists
FALLBACK_PRICING = {
    "standard": (1000, 50, 10),
    "express": (2500, 100, 20),
    "5 tons": (45000, 50, 100),
    "10 tons": (85000, 75, 150),
    "15 tons": (125000, 100, 200),
}
FALLBACK_SERVICE_TYPE = "standard"

# Seeded into an empty pricing table
DEFAULT_PRICING_CONFIGS = [
    {"service_type": "5 tons", "base_price": 45000.00, "price_per_kg": 50.00, "price_per_km": 100.00},
    {"service_type": "10 tons", "base_price": 85000.00, "price_per_kg": 75.00, "price_per_km": 150.00},
    {"service_type": "15 tons", "base_price": 125000.00, "price_per_kg": 100.00, "price_per_km": 200.00},
]

# Amount charged when a shipment has no fee yet
DEFAULT_CHECKOUT_AMOUNT = 5000

TRACKING_NUMBER_PREFIX = "BLY"

SUPPORT_CONTACT_INFO = {
    "email": "support@blynelogistics.com",
    "phone": "+1 (555) 123-4567",
    "address": "123 Logistics Way, Shipping City, SC 12345",
    "hours": {
        "weekdays": "9:00 AM - 6:00 PM",
        "saturday": "10:00 AM - 4:00 PM",
        "sunday": "Closed",
    },
    "social": {
        "twitter": "@blynelogistics",
        "facebook": "blynelogistics",
        "linkedin": "blyne-logistics",
    },
}

DEFAULT_FAQS = [
    {
        "question": "How do I track my shipment?",
        "answer": "You can track your shipment by entering your tracking number on our tracking page or in your dashboard.",
        "category": "shipping",
        "order_index": 1,
    },
    {
        "question": "What are your delivery times?",
        "answer": "Express: 1 day, Priority: 2-3 days, Standard: 5-7 days, Economy: 7-10 days.",
        "category": "shipping",
        "order_index": 2,
    },
    {
        "question": "How do I create an account?",
        "answer": "Click the Sign Up button and fill in your details. You will receive a confirmation email.",
        "category": "general",
        "order_index": 3,
    },
    {
        "question": "What payment methods do you accept?",
        "answer": "We accept all major credit cards, PayPal, and bank transfers.",
        "category": "billing",
        "order_index": 4,
    },
    {
        "question": "How do I cancel a shipment?",
        "answer": "You can cancel a shipment from your dashboard if it has not been picked up yet.",
        "category": "shipping",
        "order_index": 5,
    },
]

# Operating expenses breakdown reported by analytics until an expenses ledger exists
STATIC_EXPENSES = [
    {"name": "Fuel", "amount": 15000},
    {"name": "Maintenance", "amount": 8000},
    {"name": "Salaries", "amount": 12000},
    {"name": "Insurance", "amount": 5000},
    {"name": "Other", "amount": 5000},
]
