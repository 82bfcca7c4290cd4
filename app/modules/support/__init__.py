"""
Support Module - Customer support channels

Features:
- Support tickets with replies (staff replies flagged, closed tickets reopen on reply)
- Public FAQs with category filter and text search
- Static contact information and contact form submissions
- Live chat sessions and messages

Architecture:
- router.py: Support endpoints
- service.py: Ticket, FAQ, contact and chat rules
- repository.py: Support tables data access
- schemas.py: Request/response models
"""

from .router import router
from .service import SupportService
from .repository import SupportRepository

__all__ = [
    "router",
    "SupportService",
    "SupportRepository"
]
