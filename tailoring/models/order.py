"""
Order and order progress models
"""

from decimal import Decimal

from sqlalchemy import Column, Integer, String, DateTime, Date, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tailoring.database import Base
from tailoring.models.enums import OrderStatus

class Order(Base):
    """A tailoring job for one customer"""
    __tablename__ = "orders"
    
    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    garment_type = Column(String(100), nullable=False)
    fabric_type = Column(String(100), nullable=False)
    style_details = Column(Text, nullable=False, default="")
    special_instructions = Column(Text, nullable=False, default="")
    order_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(Date, nullable=False)
    total_amount = Column(Numeric(18, 2), nullable=False, default=0)
    advance_paid = Column(Numeric(18, 2), nullable=False, default=0)
    status = Column(Integer, default=OrderStatus.PENDING.value, nullable=False, index=True)
    priority = Column(Integer, default=3, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    customer = relationship("Customer", back_populates="orders")
    progress_updates = relationship(
        "OrderProgress",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderProgress.id",
    )

    @property
    def balance(self) -> Decimal:
        return Decimal(self.total_amount or 0) - Decimal(self.advance_paid or 0)

    @property
    def customer_name(self) -> str:
        if self.customer is None:
            return "Unknown"
        return self.customer.full_name

    @property
    def measurements(self):
        return list(self.customer.measurements) if self.customer is not None else []

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status={self.status})>"


class OrderProgress(Base):
    """Append-only status history entry for an order"""
    __tablename__ = "order_progress"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="progress_updates")

    def __repr__(self):
        return f"<OrderProgress(id={self.id}, order_id={self.order_id}, status={self.status})>"
