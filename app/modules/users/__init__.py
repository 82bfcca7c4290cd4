# app/modules/users/__init__.py
"""
Users Module - Accounts, profile, addresses and notifications

Features:
- Admin listing and update of accounts
- Profile with booking stats, avatar upload, password change
- Saved addresses with a single default
- In-app notifications with unread counter

Architecture:
- router.py: /users endpoints (+ /addresses)
- service.py: Account, address and notification rules
- repository.py: users, addresses and notifications data access
- schemas.py: Request/response models
"""

from .router import router, addresses_router
from .service import UsersService, AddressesService
from .repository import UsersRepository, AddressesRepository, NotificationsRepository

__all__ = [
    "router",
    "addresses_router",
    "UsersService",
    "AddressesService",
    "UsersRepository",
    "AddressesRepository",
    "NotificationsRepository"
]
