import uuid
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.database import get_db
from app.shared.database.models import User
from app.core.auth.service import AuthService

security = HTTPBearer(auto_error=False)

class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Not enough permissions"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )

def _resolve_user(token: str, db: Session) -> User:
    """Load the user behind an access token"""

    payload = AuthService.verify_token(token)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    # Reset tokens are not access tokens
    if payload.get("purpose"):
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("user_id")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    try:
        user_uuid = uuid.UUID(str(user_id))
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    user = db.query(User).filter(User.id == user_uuid).first()

    if user is None:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("Inactive user")

    return user

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Current user from the bearer token"""
    if credentials is None:
        raise AuthenticationError("No valid authorization token provided")
    return _resolve_user(credentials.credentials, db)

async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None"""
    if credentials is None:
        return None
    try:
        return _resolve_user(credentials.credentials, db)
    except AuthenticationError:
        return None

def require_roles(allowed_roles: List[str]):
    """Factory for a dependency that requires one of the given roles"""
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"Access denied. Required role: {' or '.join(allowed_roles)}"
            )
        return current_user
    return role_checker

# Role shortcuts
def get_admin_user(current_user: User = Depends(require_roles(["admin"]))):
    """Dependency for administrators"""
    return current_user

def get_driver_or_admin_user(current_user: User = Depends(require_roles(["admin", "driver"]))):
    """Dependency for drivers and administrators"""
    return current_user

# Permission helpers
def is_admin(user: User) -> bool:
    return user.role == "admin"

def can_access_user(current_user: User, target_user_id) -> bool:
    """Admins reach every account, everyone else only their own"""
    return is_admin(current_user) or current_user.id == target_user_id
