"""
Pydantic schemas for Order operations
"""

from pydantic import Field, field_validator, EmailStr
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from tailoring.models.enums import OrderStatus
from tailoring.schemas.base import CamelModel, Money
from tailoring.schemas.customer import CustomerResponse, MeasurementResponse

MeasurementValue = Optional[Decimal]

class OrderCreate(CamelModel):
    """Schema for creating an order

    Either ``customer_id`` or the ``customer_*`` details for a new customer
    must be supplied.
    """
    customer_id: Optional[int] = Field(None, description="Existing customer")
    customer_first_name: Optional[str] = Field(None, max_length=100)
    customer_last_name: Optional[str] = Field(None, max_length=100)
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = Field(None, max_length=20)

    garment_type: str = Field(..., min_length=2, max_length=100, description="Garment type")
    fabric_type: str = Field(..., min_length=2, max_length=100, description="Fabric type")
    style_details: str = Field("", max_length=500)
    special_instructions: str = Field("", max_length=1000)
    due_date: date
    total_amount: Money = Field(Decimal("0"), ge=0, max_digits=18, decimal_places=2)
    advance_paid: Money = Field(Decimal("0"), ge=0, max_digits=18, decimal_places=2)
    priority: int = Field(3, ge=1, le=3, description="1 (Normal), 2 (High) or 3 (Urgent)")

    # Measurements, in inches
    chest: MeasurementValue = Field(None, ge=0, le=500)
    waist: MeasurementValue = Field(None, ge=0, le=500)
    hip: MeasurementValue = Field(None, ge=0, le=500)
    shoulder: MeasurementValue = Field(None, ge=0, le=500)
    arm_length: MeasurementValue = Field(None, ge=0, le=500)
    inseam: MeasurementValue = Field(None, ge=0, le=500)
    neck: MeasurementValue = Field(None, ge=0, le=500)
    measurement_notes: Optional[str] = Field(None, max_length=500)

    @field_validator('garment_type', 'fabric_type', 'style_details', 'special_instructions')
    @classmethod
    def strip_text(cls, v):
        return v.strip()

    @field_validator('customer_email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v is not None else v

class OrderUpdate(CamelModel):
    """Schema for updating an order

    Only fields present in the request body are applied, so an explicit
    empty string clears a text field while an omitted one is left alone.
    """
    garment_type: Optional[str] = Field(None, min_length=2, max_length=100)
    fabric_type: Optional[str] = Field(None, min_length=2, max_length=100)
    style_details: Optional[str] = Field(None, max_length=500)
    special_instructions: Optional[str] = Field(None, max_length=1000)
    due_date: Optional[date] = None
    total_amount: Optional[Money] = Field(None, ge=0, max_digits=18, decimal_places=2)
    advance_paid: Optional[Money] = Field(None, ge=0, max_digits=18, decimal_places=2)
    status: Optional[OrderStatus] = None
    priority: Optional[int] = Field(None, ge=1, le=3)

    def present_fields(self) -> dict:
        """Fields the client actually sent, with their values"""
        return {name: getattr(self, name) for name in self.model_fields_set}

class OrderProgressResponse(CamelModel):
    id: int
    order_id: int
    status: OrderStatus
    note: Optional[str] = None
    created_at: Optional[datetime] = None

class OrderResponse(CamelModel):
    """Schema for order responses"""
    id: int
    customer_id: int
    order_number: str
    garment_type: str
    fabric_type: str
    style_details: str
    special_instructions: str
    order_date: datetime
    due_date: date
    total_amount: Money
    advance_paid: Money
    balance: Money
    status: OrderStatus
    priority: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class OrderDetailResponse(OrderResponse):
    """Order with its customer, the customer's measurements and progress history"""
    customer: Optional[CustomerResponse] = None
    measurements: List[MeasurementResponse] = []
    progress_updates: List[OrderProgressResponse] = []

class OrderListItem(CamelModel):
    """Flattened order row for list views"""
    id: int
    order_number: str
    customer_id: int
    customer_name: str
    garment_type: str
    fabric_type: str
    status: OrderStatus
    order_date: datetime
    due_date: date
    total_amount: Money
    advance_paid: Money
    balance: Money
    priority: int

class PaginatedOrdersResponse(CamelModel):
    """Schema for paginated order list responses"""
    items: List[OrderListItem]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
