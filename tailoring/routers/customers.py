"""
Customer endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from typing import List
import logging

from tailoring.database import get_db
from tailoring.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse, MeasurementResponse
from tailoring.services.customer_service import CustomerService
from tailoring.auth.auth_handler import require_access
from tailoring.utils.error_handler import DatabaseError, ServiceError
from tailoring.utils.rate_limiter import limiter, READ_LIMIT, WRITE_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=List[CustomerResponse])
@limiter.limit(READ_LIMIT)
async def get_customers(
    request: Request,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """List all customers (Admin only)"""
    try:
        return await CustomerService(db).get_all_customers()

    except DatabaseError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving customers: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/{customer_id}", response_model=CustomerResponse)
@limiter.limit(READ_LIMIT)
async def get_customer(
    request: Request,
    customer_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    try:
        customer = await CustomerService(db).get_customer_by_id(customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    except (HTTPException, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Error retrieving customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/{customer_id}/measurements", response_model=List[MeasurementResponse])
@limiter.limit(READ_LIMIT)
async def get_customer_measurements(
    request: Request,
    customer_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Measurements recorded for a customer, newest first"""
    try:
        return await CustomerService(db).get_customer_measurements(customer_id)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Error retrieving measurements for customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("", response_model=CustomerResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_customer(
    request: Request,
    response: Response,
    customer: CustomerCreate,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Create a customer (Admin only)"""
    try:
        created = await CustomerService(db).create_customer(customer)
        response.headers["Location"] = str(request.url_for("get_customer", customer_id=created.id))
        return created

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Error creating customer: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

@router.put("/{customer_id}", status_code=204)
@limiter.limit(WRITE_LIMIT)
async def update_customer(
    request: Request,
    customer_id: int,
    customer: CustomerUpdate,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Update the supplied fields of a customer (Admin only)"""
    try:
        await CustomerService(db).update_customer(customer_id, customer)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Error updating customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

@router.delete("/{customer_id}", status_code=204)
@limiter.limit(WRITE_LIMIT)
async def delete_customer(
    request: Request,
    customer_id: int,
    current_user: dict = Depends(require_access),
    db: Session = Depends(get_db)
):
    """Delete a customer (Admin only); unknown ids succeed silently"""
    try:
        await CustomerService(db).delete_customer(customer_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Error deleting customer {customer_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
