"""
Pydantic schemas for customers and their measurements
"""

from pydantic import Field, field_validator, EmailStr
from typing import Optional
from datetime import datetime

from tailoring.schemas.base import CamelModel, Money

class CustomerCreate(CamelModel):
    """Schema for creating a customer"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field("", max_length=20)
    address: str = Field("", max_length=500)

    @field_validator('first_name', 'last_name', 'phone', 'address')
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

class CustomerUpdate(CamelModel):
    """Schema for updating a customer; only supplied fields change"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v is not None else v

class CustomerResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class MeasurementResponse(CamelModel):
    id: int
    customer_id: int
    measurement_type: str
    taken_on: datetime
    chest: Money
    waist: Money
    hip: Money
    shoulder: Money
    arm_length: Money
    inseam: Money
    neck: Money
    additional_notes: Optional[str] = None
