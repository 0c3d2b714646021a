"""
Order management endpoints
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional, List
import logging

from tailoring.database import get_db
from tailoring.schemas.order import (
    OrderCreate, OrderUpdate, OrderResponse, OrderDetailResponse,
    OrderProgressResponse, PaginatedOrdersResponse
)
from tailoring.services.order_service import OrderService, DEFAULT_SORT
from tailoring.auth.auth_handler import require_access
from tailoring.utils.error_handler import DatabaseError, ServiceError
from tailoring.utils.rate_limiter import limiter, READ_LIMIT, WRITE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=PaginatedOrdersResponse)
@limiter.limit(READ_LIMIT)
async def get_orders(
    request: Request,
    page_number: int = Query(1, ge=1, alias="pageNumber", description="Page number"),
    page_size: int = Query(10, ge=1, alias="pageSize", description="Items per page"),
    customer_id: Optional[int] = Query(None, alias="customerId", description="Filter by customer"),
    sort_by: str = Query(DEFAULT_SORT, alias="sortBy", description="priority, date, duedate or status"),
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Get a sorted, paginated list of orders"""
    try:
        return await OrderService(db).list_orders(page_number, page_size, customer_id, sort_by)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to get orders: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve orders")

@router.get("/pending", response_model=List[OrderResponse])
@limiter.limit(READ_LIMIT)
async def get_pending_orders(
    request: Request,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Orders that are neither delivered nor cancelled"""
    try:
        return await OrderService(db).get_pending_orders()

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Failed to get pending orders: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve orders")

@router.get("/customer/{customer_id}", response_model=List[OrderResponse])
@limiter.limit(READ_LIMIT)
async def get_orders_by_customer(
    request: Request,
    customer_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    try:
        return await OrderService(db).get_orders_by_customer(customer_id)

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Failed to get orders for customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve orders")

@router.get("/{order_id}", response_model=OrderDetailResponse)
@limiter.limit(READ_LIMIT)
async def get_order(
    request: Request,
    order_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Get an order with its customer, measurements and progress history"""
    try:
        order = await OrderService(db).get_order_with_details(order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")

        return order

    except (HTTPException, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to get order {order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve order")

@router.get("/{order_id}/progress", response_model=List[OrderProgressResponse])
@limiter.limit(READ_LIMIT)
async def get_order_progress(
    request: Request,
    order_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Status history of an order, oldest first"""
    try:
        return await OrderService(db).get_order_progress(order_id)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to get progress for order {order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to retrieve order progress")

@router.post("", response_model=OrderResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_order(
    request: Request,
    response: Response,
    order: OrderCreate,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Create a new order (Admin only)"""
    try:
        logger.info(
            f"Creating order for customer {order.customer_id} with garment type {order.garment_type}"
        )
        db_order = await OrderService(db).create_order(order)

        response.headers["Location"] = str(request.url_for("get_order", order_id=db_order.id))
        return db_order

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to create order: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create order")

@router.put("/{order_id}", response_model=OrderResponse)
@limiter.limit(WRITE_LIMIT)
async def update_order(
    request: Request,
    order_id: int,
    order_update: OrderUpdate,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Update the supplied fields of an order (Admin only)"""
    try:
        return await OrderService(db).update_order(order_id, order_update)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to update order {order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update order")

@router.delete("/{order_id}", status_code=204)
@limiter.limit(WRITE_LIMIT)
async def delete_order(
    request: Request,
    order_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Delete an order and its progress history (Admin only)"""
    try:
        await OrderService(db).delete_order(order_id)

        logger.info(f"User {current_user['username']} deleted order {order_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to delete order {order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete order")

@router.put("/{order_id}/status", response_model=OrderResponse)
@limiter.limit(WRITE_LIMIT)
async def update_order_status(
    request: Request,
    order_id: int,
    new_status: int = Body(..., description="Numeric order status code"),
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Set an order's status from its numeric code"""
    try:
        return await OrderService(db).update_order_status(
            order_id, new_status, note=f"Updated by {current_user['username']}"
        )

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Failed to update status for order {order_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update order status")
