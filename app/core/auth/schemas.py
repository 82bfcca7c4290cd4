import re
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional
from datetime import datetime
from uuid import UUID

PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]")
PASSWORD_RULES_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, "
    "one number and one special character"
)

def validate_password_strength(value: str) -> str:
    """Shared password policy for registration, reset and change"""
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not PASSWORD_PATTERN.match(value):
        raise ValueError(PASSWORD_RULES_MESSAGE)
    return value

class UserLogin(BaseModel):
    """Login with email and password"""
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "customer@blynelogistics.com",
                "password": "Customer@123"
            }
        }

class RegisterRequest(BaseModel):
    """New customer account"""
    email: EmailStr
    password: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    phone: Optional[str] = None
    company_name: Optional[str] = Field(None, alias="companyName")
    client_category: Optional[str] = Field(None, alias="clientCategory")

    @validator('password')
    def check_password(cls, v):
        return validate_password_strength(v)

    @validator('first_name', 'last_name')
    def check_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "email": "customer@blynelogistics.com",
                "password": "Customer@123",
                "firstName": "Ada",
                "lastName": "Okafor",
                "phone": "+2348012345678"
            }
        }

class UserResponse(BaseModel):
    """Public view of an account"""
    id: UUID
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    client_category: Optional[str] = None
    role: str
    avatar_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    """Access token plus the user it belongs to"""
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str = Field(..., alias="newPassword")

    @validator('new_password')
    def check_password(cls, v):
        return validate_password_strength(v)

    class Config:
        populate_by_name = True

class ChangePasswordRequest(BaseModel):
    """Password change for the logged in user"""
    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")

    @validator('new_password')
    def check_password(cls, v):
        return validate_password_strength(v)

    class Config:
        populate_by_name = True
