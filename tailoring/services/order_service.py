"""
Order service: creation, updates, status tracking and paginated listing
"""

from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import func
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
import logging
import math
import uuid

from tailoring.config import settings
from tailoring.models.customer import Customer
from tailoring.models.enums import OrderStatus, is_transition_allowed
from tailoring.models.measurement import Measurement, MEASUREMENT_FIELDS
from tailoring.models.order import Order, OrderProgress
from tailoring.schemas.order import OrderCreate, OrderUpdate, OrderListItem, PaginatedOrdersResponse
from tailoring.utils.error_handler import DuplicateIdentity, NotFound, ValidationFailure, transaction

logger = logging.getLogger(__name__)

DEFAULT_SORT = "priority"

# Sort key -> ORDER BY clauses; id keeps pages stable when everything else ties
SORT_ORDERINGS = {
    "priority": (Order.priority.asc(), Order.order_date.desc()),
    "date": (Order.order_date.desc(),),
    "duedate": (Order.due_date.asc(),),
    "status": (Order.status.asc(),),
}

# Columns that may not be set to null through a partial update
NON_NULLABLE_UPDATE_FIELDS = {
    "garment_type", "fabric_type", "due_date", "total_amount", "advance_paid", "status", "priority"
}

def utc_today() -> date:
    return datetime.utcnow().date()

def generate_order_number(now: Optional[datetime] = None) -> str:
    """ORD-<yyyyMMdd>-<HHmmss>-<8 hex chars>, unique without coordination"""
    now = now or datetime.utcnow()
    return f"ORD-{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}"

def resolve_sort(sort_by: Optional[str]) -> tuple:
    key = (sort_by or DEFAULT_SORT).strip().lower()
    return SORT_ORDERINGS.get(key, SORT_ORDERINGS[DEFAULT_SORT]) + (Order.id.asc(),)

class OrderService:
    """Service for order management operations"""

    def __init__(self, db: Session, enforce_transitions: Optional[bool] = None):
        self.db = db
        if enforce_transitions is None:
            enforce_transitions = settings.enforce_status_transitions
        self.enforce_transitions = enforce_transitions

    def _get_order(self, order_id: int) -> Order:
        order = self.db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise NotFound("Order not found")
        return order

    def _resolve_customer(self, data: OrderCreate) -> Customer:
        if data.customer_id is not None:
            customer = self.db.query(Customer).filter(Customer.id == data.customer_id).first()
            if not customer:
                raise ValidationFailure(
                    "Customer not found",
                    errors=[f"customerId: no customer with id {data.customer_id}"]
                )
            return customer

        required = {
            "customerFirstName": data.customer_first_name,
            "customerLastName": data.customer_last_name,
            "customerEmail": data.customer_email,
        }
        missing = [name for name, value in required.items() if not value or not str(value).strip()]
        if missing:
            raise ValidationFailure(
                "Either customerId or new customer details (first name, last name, email) are required",
                errors=[f"{name} is required when customerId is not provided" for name in missing]
            )

        email = data.customer_email.strip().lower()
        if self.db.query(Customer).filter(func.lower(Customer.email) == email).first():
            raise DuplicateIdentity("Email")

        customer = Customer(
            first_name=data.customer_first_name.strip(),
            last_name=data.customer_last_name.strip(),
            email=email,
            phone=(data.customer_phone or "").strip(),
            address="",
            created_at=datetime.utcnow()
        )
        self.db.add(customer)
        self.db.flush()
        logger.info(f"Created customer {customer.id} while creating an order")
        return customer

    def _check_transition(self, current: OrderStatus, new: OrderStatus):
        if self.enforce_transitions and not is_transition_allowed(current, new):
            raise ValidationFailure(
                f"Cannot change order status from {current.name} to {new.name}",
                errors=[f"status: {new.name} does not follow {current.name}"]
            )

    async def create_order(self, data: OrderCreate) -> Order:
        """Create an order, creating its customer and measurement when needed"""
        if data.due_date < utc_today():
            raise ValidationFailure(
                "Due date cannot be in the past",
                errors=[f"dueDate: {data.due_date.isoformat()} is before today"]
            )

        with transaction(self.db):
            customer = self._resolve_customer(data)
            now = datetime.utcnow()

            order = Order(
                customer_id=customer.id,
                order_number=generate_order_number(now),
                garment_type=data.garment_type,
                fabric_type=data.fabric_type,
                style_details=data.style_details or "",
                special_instructions=data.special_instructions or "",
                order_date=now,
                due_date=data.due_date,
                total_amount=data.total_amount,
                advance_paid=data.advance_paid,
                status=OrderStatus.PENDING.value,
                priority=data.priority
            )
            self.db.add(order)
            self.db.flush()

            supplied = {name: getattr(data, name) for name in MEASUREMENT_FIELDS}
            if any(value is not None for value in supplied.values()):
                measurement = Measurement(
                    customer_id=customer.id,
                    measurement_type=data.garment_type,
                    taken_on=now,
                    additional_notes=data.measurement_notes,
                    **{name: value if value is not None else Decimal("0") for name, value in supplied.items()}
                )
                self.db.add(measurement)

            self.db.add(OrderProgress(order_id=order.id, status=OrderStatus.PENDING.value, note="Order created"))

        self.db.refresh(order)
        logger.info(f"Created order {order.id} ({order.order_number}) for customer {order.customer_id}")
        return order

    async def update_order(self, order_id: int, data: OrderUpdate) -> Order:
        """Apply only the fields present in the request"""
        order = self._get_order(order_id)
        changes = data.present_fields()

        null_fields = sorted(name for name, value in changes.items()
                             if value is None and name in NON_NULLABLE_UPDATE_FIELDS)
        if null_fields:
            raise ValidationFailure(
                "Validation failed",
                errors=[f"{name} cannot be null" for name in null_fields]
            )

        with transaction(self.db):
            new_status = changes.pop("status", None)
            if new_status is not None and new_status != order.status:
                self._check_transition(OrderStatus(order.status), new_status)
                order.status = new_status.value
                self.db.add(OrderProgress(order_id=order.id, status=new_status.value, note="Status changed by order update"))

            for field, value in changes.items():
                setattr(order, field, value if value is not None else "")
            order.updated_at = datetime.utcnow()

        self.db.refresh(order)
        logger.info(f"Updated order {order_id}: {sorted(data.model_fields_set)}")
        return order

    async def update_order_status(self, order_id: int, status_code: int, note: Optional[str] = None) -> Order:
        order = self._get_order(order_id)

        try:
            new_status = OrderStatus.from_code(status_code)
        except ValueError:
            raise ValidationFailure(
                "Invalid order status",
                errors=[f"status: {status_code} is not a defined order status"]
            )

        self._check_transition(OrderStatus(order.status), new_status)

        with transaction(self.db):
            order.status = new_status.value
            order.updated_at = datetime.utcnow()
            self.db.add(OrderProgress(order_id=order.id, status=new_status.value, note=note))

        self.db.refresh(order)
        logger.info(f"Order {order_id} status set to {new_status.name}")
        return order

    async def delete_order(self, order_id: int) -> None:
        order = self._get_order(order_id)
        with transaction(self.db):
            self.db.delete(order)
        logger.info(f"Deleted order {order_id}")

    async def list_orders(
        self,
        page_number: int = 1,
        page_size: int = 10,
        customer_id: Optional[int] = None,
        sort_by: Optional[str] = DEFAULT_SORT
    ) -> PaginatedOrdersResponse:
        """Filter, sort and page orders"""
        if page_number < 1 or page_size < 1:
            raise ValidationFailure(
                "pageNumber and pageSize must be positive",
                errors=[f"{name}: must be at least 1" for name, value in
                        (("pageNumber", page_number), ("pageSize", page_size)) if value < 1]
            )

        query = self.db.query(Order)
        if customer_id is not None:
            query = query.filter(Order.customer_id == customer_id)

        total = query.count()

        offset = (page_number - 1) * page_size
        orders = (
            query.options(joinedload(Order.customer))
            .order_by(*resolve_sort(sort_by))
            .offset(offset)
            .limit(page_size)
            .all()
        )

        return PaginatedOrdersResponse(
            items=[OrderListItem.model_validate(order) for order in orders],
            total_count=total,
            page_number=page_number,
            page_size=page_size,
            total_pages=math.ceil(total / page_size)
        )

    async def get_pending_orders(self) -> List[Order]:
        closed = [s.value for s in OrderStatus if s.is_closed]
        return (
            self.db.query(Order)
            .filter(Order.status.notin_(closed))
            .order_by(*resolve_sort(DEFAULT_SORT))
            .all()
        )

    async def get_orders_by_customer(self, customer_id: int) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.customer_id == customer_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .all()
        )

    async def get_order_with_details(self, order_id: int) -> Optional[Order]:
        return (
            self.db.query(Order)
            .options(
                joinedload(Order.customer).selectinload(Customer.measurements),
                selectinload(Order.progress_updates)
            )
            .filter(Order.id == order_id)
            .first()
        )

    async def get_order_progress(self, order_id: int) -> List[OrderProgress]:
        self._get_order(order_id)
        return (
            self.db.query(OrderProgress)
            .filter(OrderProgress.order_id == order_id)
            .order_by(OrderProgress.id)
            .all()
        )
