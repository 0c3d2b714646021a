"""
Pydantic schemas for authentication
"""

from pydantic import Field, field_validator, EmailStr
from typing import Optional
from datetime import datetime
import re

from tailoring.schemas.base import CamelModel

class RegisterRequest(CamelModel):
    """Schema for self-service registration"""
    username: str = Field(..., min_length=3, max_length=50, description="Username (3-50 characters)")
    email: EmailStr = Field(..., description="Valid email address")
    password: str = Field(..., min_length=6, max_length=128, description="Password (minimum 6 characters)")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    phone: Optional[str] = Field("", max_length=20, description="Phone number")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if not re.match(r'^[a-zA-Z0-9_.-]{3,50}$', v):
            raise ValueError('Username can only contain letters, numbers, dots, underscores, and hyphens')
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Name cannot be blank')
        return v

    @field_validator('phone')
    @classmethod
    def strip_phone(cls, v):
        return (v or "").strip()

class LoginRequest(CamelModel):
    """Schema for user login; username may also be an email address"""
    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1, description="Password")

class AuthResponse(CamelModel):
    """Token plus the identity it was issued for"""
    token: str
    username: str
    email: str
    role: str
    customer_id: Optional[int] = None
    expires_at: datetime

class TokenValidationResponse(CamelModel):
    valid: bool
    username: str
    role: str
