"""
Authentication endpoints for login, registration and token validation
"""

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from tailoring.database import get_db
from tailoring.schemas.user import RegisterRequest, LoginRequest, AuthResponse, TokenValidationResponse
from tailoring.services.user_service import UserService
from tailoring.services.activity_logger import ActivityLogger
from tailoring.auth.auth_handler import get_current_user
from tailoring.utils.error_handler import DatabaseError, ServiceError, InvalidCredentials
from tailoring.utils.rate_limiter import limiter, LOGIN_LIMIT, REGISTER_LIMIT, READ_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_LIMIT)  # Prevent brute force attacks
async def login(
    request: Request,
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """Authenticate with username or email and return a bearer token"""
    activity_logger = ActivityLogger(db)
    try:
        user_service = UserService(db)
        result = await user_service.login(login_data)

        await activity_logger.log_request(request, status.HTTP_200_OK, username=result.username)
        logger.info(f"User {result.username} logged in successfully")
        return result

    except InvalidCredentials:
        await activity_logger.log_request(
            request,
            status.HTTP_401_UNAUTHORIZED,
            username=login_data.username.strip(),
            error_message="Failed login attempt"
        )
        raise
    except (HTTPException, ServiceError, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Login failed for {login_data.username}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during login"
        )

@router.post("/register", response_model=AuthResponse)
@limiter.limit(REGISTER_LIMIT)  # Strict limit to prevent spam registrations
async def register(
    request: Request,
    user_data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """Register a customer account and return a bearer token"""
    activity_logger = ActivityLogger(db)
    try:
        user_service = UserService(db)
        result = await user_service.register(user_data)

        await activity_logger.log_request(request, status.HTTP_200_OK, username=result.username)
        logger.info(f"User {result.username} registered successfully")
        return result

    except ServiceError as e:
        logger.warning(f"Registration failed for {user_data.username}: {e.message}")
        await activity_logger.log_request(
            request, e.status_code, username=user_data.username, error_message=e.message
        )
        raise
    except (HTTPException, DatabaseError):
        raise
    except Exception as e:
        logger.error(f"Registration failed for {user_data.username}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )

@router.get("/validate", response_model=TokenValidationResponse)
@limiter.limit(READ_LIMIT)
async def validate_token(
    request: Request,
    current_user: dict = Depends(get_current_user)
):
    """Echo the identity carried by an already-verified token"""
    return TokenValidationResponse(
        valid=True,
        username=current_user["username"],
        role=current_user["role"]
    )
