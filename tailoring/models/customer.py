"""
Customer model
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tailoring.database import Base

class Customer(Base):
    """Person or business receiving tailoring services"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Orders are restricted (see Order.customer_id); measurements go with the customer
    orders = relationship("Order", back_populates="customer", passive_deletes="all")
    measurements = relationship(
        "Measurement",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Measurement.taken_on.desc()",
    )
    user = relationship("User", back_populates="customer", uselist=False, passive_deletes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.full_name}', email='{self.email}')>"
