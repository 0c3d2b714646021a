"""
Body measurement model
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tailoring.database import Base

# Numeric measurement columns, all in inches
MEASUREMENT_FIELDS = ("chest", "waist", "hip", "shoulder", "arm_length", "inseam", "neck")

class Measurement(Base):
    """A set of body measurements taken for a customer"""
    __tablename__ = "measurements"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    measurement_type = Column(String(100), nullable=False, default="")  # e.g. Shirt, Pant, Suit
    taken_on = Column(DateTime(timezone=True), nullable=False)
    chest = Column(Numeric(10, 2), nullable=False, default=0)
    waist = Column(Numeric(10, 2), nullable=False, default=0)
    hip = Column(Numeric(10, 2), nullable=False, default=0)
    shoulder = Column(Numeric(10, 2), nullable=False, default=0)
    arm_length = Column(Numeric(10, 2), nullable=False, default=0)
    inseam = Column(Numeric(10, 2), nullable=False, default=0)
    neck = Column(Numeric(10, 2), nullable=False, default=0)
    additional_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="measurements")

    def __repr__(self):
        return f"<Measurement(id={self.id}, customer_id={self.customer_id}, type='{self.measurement_type}')>"
