"""
Enumerations shared by models, schemas and services
"""

import enum


class UserRole(str, enum.Enum):
    """Roles a user account can hold"""
    ADMIN = "Admin"
    CUSTOMER = "Customer"


class OrderStatus(enum.IntEnum):
    """Lifecycle of a tailoring order; values are the wire codes"""
    PENDING = 1
    MEASUREMENT_TAKEN = 2
    CUTTING = 3
    STITCHING = 4
    FINISHING = 5
    QUALITY_CHECK = 6
    READY_FOR_DELIVERY = 7
    DELIVERED = 8
    CANCELLED = 9

    @classmethod
    def from_code(cls, code: int) -> "OrderStatus":
        """Map a numeric code to a status, raising ValueError if undefined"""
        return cls(code)

    @property
    def is_closed(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


# Forward step in the workshop, or cancellation from any open state
ALLOWED_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.MEASUREMENT_TAKEN, OrderStatus.CANCELLED},
    OrderStatus.MEASUREMENT_TAKEN: {OrderStatus.CUTTING, OrderStatus.CANCELLED},
    OrderStatus.CUTTING: {OrderStatus.STITCHING, OrderStatus.CANCELLED},
    OrderStatus.STITCHING: {OrderStatus.FINISHING, OrderStatus.CANCELLED},
    OrderStatus.FINISHING: {OrderStatus.QUALITY_CHECK, OrderStatus.CANCELLED},
    OrderStatus.QUALITY_CHECK: {OrderStatus.READY_FOR_DELIVERY, OrderStatus.STITCHING, OrderStatus.CANCELLED},
    OrderStatus.READY_FOR_DELIVERY: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def is_transition_allowed(current: OrderStatus, new: OrderStatus) -> bool:
    if current == new:
        return True
    return new in ALLOWED_STATUS_TRANSITIONS.get(current, set())
