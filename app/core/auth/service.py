from datetime import datetime, timedelta, timezone
from typing import Optional
import hashlib
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext
from app.config.settings import settings

logger = logging.getLogger(__name__)

# Password context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_RESET_PURPOSE = "password_reset"

class AuthService:
    """Password hashing and JWT handling"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Check a password against its bcrypt hash"""
        try:
            # bcrypt only looks at the first 72 bytes
            encoded_password = plain_password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
            return pwd_context.verify(encoded_password, hashed_password)
        except ValueError as e:
            logger.warning(f"Password verification error: {str(e)}")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password"""
        encoded_password = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
        return pwd_context.hash(encoded_password)

    @staticmethod
    def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """Create a signed access token"""
        to_encode = data.copy()

        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)

        to_encode.update({"exp": expire})

        if "user_id" not in to_encode:
            raise ValueError("user_id is required in the token")

        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Decode a token, None when invalid or expired"""
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            return None

    @staticmethod
    def password_fingerprint(password_hash: str) -> str:
        """Short digest of the stored hash; changes whenever the password does"""
        return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]

    @staticmethod
    def create_password_reset_token(user_id: str, email: str, password_hash: str) -> str:
        return AuthService.create_access_token(
            {
                "user_id": user_id,
                "email": email,
                "purpose": PASSWORD_RESET_PURPOSE,
                "pwd": AuthService.password_fingerprint(password_hash)
            },
            expires_delta=timedelta(minutes=settings.password_reset_expire_minutes)
        )

    @staticmethod
    def verify_password_reset_token(token: str, password_hash: str) -> Optional[dict]:
        """Reset claims, None when invalid, expired or already used"""
        payload = AuthService.verify_token(token)
        if not payload or payload.get("purpose") != PASSWORD_RESET_PURPOSE:
            return None
        if payload.get("pwd") != AuthService.password_fingerprint(password_hash):
            return None
        return payload
