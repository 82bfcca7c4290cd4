import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import settings
from app.core.auth.service import AuthService
from app.core.auth.schemas import (
    UserLogin, RegisterRequest, TokenResponse, UserResponse,
    ForgotPasswordRequest, ResetPasswordRequest
)
from app.shared.database.models import User, AuthAuditLog
from app.core.auth.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = "If an account exists for this email, a password reset link has been sent."

def _build_token_response(user: User, message: str = "Login successful") -> TokenResponse:
    token_data = {
        "user_id": str(user.id),
        "email": user.email,
        "role": user.role
    }
    access_token = AuthService.create_access_token(data=token_data)
    return TokenResponse(
        message=message,
        access_token=access_token,
        token_type="bearer",
        user=UserResponse.model_validate(user)
    )

def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()

    if not user or not AuthService.verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )
    return user

def _record_audit(
    db: Session,
    event_type: str,
    request: Request,
    email: Optional[str] = None,
    user: Optional[User] = None,
    metadata: Optional[dict] = None
) -> None:
    db.add(AuthAuditLog(
        user_id=user.id if user else None,
        email=email or (user.email if user else None),
        event_type=event_type,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        metadata_=metadata or {}
    ))
    db.commit()

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register a customer account

    **Rules:**
    - Password: 8+ chars with upper, lower, digit and one of `@$!%*?&`
    - First and last name are required
    - New accounts always get the `user` role
    """
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="An account with this email already exists")

    user = User(
        email=email,
        password_hash=AuthService.get_password_hash(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        company_name=payload.company_name,
        client_category=payload.client_category,
        role="user",
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"✅ New account registered: {user.email}")
    return _build_token_response(user, message="Registration successful")

@router.post("/login", response_model=TokenResponse)
async def login(
    user_login: UserLogin,
    db: Session = Depends(get_db)
):
    """
    Login with a JSON body

    **Body:**
    ```json
    {"email": "user@example.com", "password": "Secret@123"}
    ```
    """
    user = _authenticate(db, user_login.email, user_login.password)
    return _build_token_response(user)

@router.post("/token", response_model=TokenResponse)
async def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 password flow (used by the interactive docs)

    - **username**: account email
    - **password**: account password
    """
    user = _authenticate(db, form_data.username, form_data.password)
    return _build_token_response(user)

@router.post("/logout")
async def logout():
    """
    Logout (stateless JWT, informational only)

    The client must drop the token from its storage.
    """
    return {"message": "Logged out successfully"}

@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Start a password reset; the answer never reveals whether the email exists"""
    email = payload.email.lower()
    user = db.query(User).filter(User.email == email).first()

    if user and user.is_active:
        token = AuthService.create_password_reset_token(str(user.id), user.email, user.password_hash)
        _record_audit(db, "password_reset_request", request, email=email, user=user)
        reset_link = f"{settings.frontend_base_url}/reset-password?token={token}"
        logger.info(f"🔑 Password reset requested for {email}: {reset_link}")
    else:
        _record_audit(db, "password_reset_request", request, email=email, metadata={"known_account": False})

    return {"message": FORGOT_PASSWORD_MESSAGE}

@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Set a new password from a reset token"""
    claims = AuthService.verify_token(payload.token) or {}
    user = db.query(User).filter(User.email == claims.get("email")).first() if claims.get("email") else None

    # Tokens are bound to the password hash they were issued for
    token_data = AuthService.verify_password_reset_token(payload.token, user.password_hash) if user else None
    if not token_data or str(user.id) != token_data.get("user_id"):
        _record_audit(db, "password_reset_failure", request, metadata={"reason": "invalid_token"})
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    user.password_hash = AuthService.get_password_hash(payload.new_password)
    db.commit()
    _record_audit(db, "password_reset_success", request, user=user)

    logger.info(f"✅ Password reset completed for {user.email}")
    return {"message": "Password has been reset successfully"}

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """
    Current account

    **Headers:**
    - Authorization: Bearer {token}
    """
    return current_user
