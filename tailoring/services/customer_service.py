"""
Customer service: persistence passthrough for customer records
"""

from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import datetime
from typing import Optional, List
import logging

from tailoring.models.customer import Customer
from tailoring.models.measurement import Measurement
from tailoring.models.order import Order
from tailoring.schemas.customer import CustomerCreate, CustomerUpdate
from tailoring.utils.error_handler import DuplicateIdentity, NotFound, ValidationFailure, transaction

logger = logging.getLogger(__name__)

class CustomerService:
    """Service for customer CRUD"""

    def __init__(self, db: Session):
        self.db = db

    def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Customer).filter(func.lower(Customer.email) == email.lower())
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        return query.first() is not None

    async def get_all_customers(self) -> List[Customer]:
        return self.db.query(Customer).order_by(Customer.last_name, Customer.first_name).all()

    async def get_customer_by_id(self, customer_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    async def create_customer(self, data: CustomerCreate) -> Customer:
        if self._email_taken(data.email):
            raise DuplicateIdentity("Email")

        with transaction(self.db):
            customer = Customer(**data.model_dump())
            customer.created_at = datetime.utcnow()
            self.db.add(customer)

        self.db.refresh(customer)
        logger.info(f"Created customer {customer.id} ({customer.email})")
        return customer

    async def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = await self.get_customer_by_id(customer_id)
        if not customer:
            raise NotFound("Customer not found")

        update_data = data.model_dump(exclude_unset=True)
        for required in ("first_name", "last_name", "email"):
            if required in update_data and update_data[required] is None:
                raise ValidationFailure(f"{required} cannot be null", errors=[f"{required} cannot be null"])

        if update_data.get("email") and self._email_taken(update_data["email"], exclude_id=customer_id):
            raise DuplicateIdentity("Email")

        with transaction(self.db):
            for field, value in update_data.items():
                setattr(customer, field, value if value is not None else "")
            customer.updated_at = datetime.utcnow()

        self.db.refresh(customer)
        logger.info(f"Updated customer {customer_id}")
        return customer

    async def delete_customer(self, customer_id: int) -> None:
        """Delete a customer; unknown ids are ignored, customers with orders are kept"""
        customer = await self.get_customer_by_id(customer_id)
        if customer is None:
            return

        order_count = self.db.query(Order).filter(Order.customer_id == customer_id).count()
        if order_count:
            raise ValidationFailure(
                f"Customer has {order_count} order(s) and cannot be deleted",
                errors=[f"orders: customer {customer_id} still has {order_count} order(s)"]
            )

        with transaction(self.db):
            self.db.delete(customer)

        logger.info(f"Deleted customer {customer_id}")

    async def get_customer_measurements(self, customer_id: int) -> List[Measurement]:
        if not await self.get_customer_by_id(customer_id):
            raise NotFound("Customer not found")
        return (
            self.db.query(Measurement)
            .filter(Measurement.customer_id == customer_id)
            .order_by(Measurement.taken_on.desc())
            .all()
        )
