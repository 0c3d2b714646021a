"""
Error taxonomy, transaction scope and HTTP error mapping
"""

import uuid
import logging
from typing import Optional, List
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

class ErrorContext:
    """Request details attached to error logs"""

    def __init__(self, request: Request):
        self.error_id = str(uuid.uuid4())
        self.request = request
        self.endpoint = str(request.url.path)
        self.method = request.method
        self.client_ip = self._get_client_ip()
        self.timestamp = datetime.utcnow()

    def _get_client_ip(self) -> Optional[str]:
        """Extract client IP from request headers"""
        if "x-forwarded-for" in self.request.headers:
            return self.request.headers["x-forwarded-for"].split(",")[0].strip()
        elif "x-real-ip" in self.request.headers:
            return self.request.headers["x-real-ip"]
        elif self.request.client:
            return self.request.client.host
        return None

class ServiceError(Exception):
    """Business-rule violation raised by the service layer"""
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"message": self.message}

class ValidationFailure(ServiceError):
    """Missing or out-of-range input"""
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        # Always itemized; a bare message stands in as its own single entry
        self.errors = errors or [message]

    def to_content(self) -> dict:
        return {"message": self.message, "errors": self.errors}

class DuplicateIdentity(ServiceError):
    """A unique identity field (username, email) is already taken"""
    status_code = 400

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already exists")

    def to_content(self) -> dict:
        return {"message": self.message, "field": self.field}

class InvalidCredentials(ServiceError):
    """Login failed; never says which half was wrong"""
    status_code = 401

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)

class NotFound(ServiceError):
    status_code = 404

class DatabaseError(Exception):
    """Custom exception for database-related errors"""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

class transaction:
    """Commit on success, roll back on any failure

    One instance spans one use case, so every row it writes lands together
    or not at all.
    """

    def __init__(self, db: Session):
        self.db = db

    def __enter__(self) -> Session:
        return self.db

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.db.rollback()
            if isinstance(exc_val, IntegrityError):
                logger.error(f"Integrity constraint violated: {exc_val.orig}")
                raise DatabaseError("Database integrity constraint violation", exc_val) from exc_val
            if isinstance(exc_val, SQLAlchemyError):
                logger.error(f"Database operation failed: {exc_val}")
                raise DatabaseError(f"Database operation failed: {exc_val}", exc_val) from exc_val
            return False

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity constraint violated on commit: {e.orig}")
            raise DatabaseError("Database integrity constraint violation", e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database transaction error: {e}")
            raise DatabaseError(f"Database transaction failed: {e}", e) from e
        return False

def _format_validation_errors(exc: RequestValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        message = error.get("msg", "Invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return messages

async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())

async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = _format_validation_errors(exc)
    logger.info(f"Validation failed for {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

async def database_error_handler(request: Request, exc: DatabaseError):
    error_context = ErrorContext(request)
    logger.error(
        f"Database error {error_context.error_id} in {error_context.method} {error_context.endpoint}: {exc.message}",
        exc_info=exc.original_error,
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "A database error occurred. Please try again later.",
            "error_id": error_context.error_id,
        },
    )

async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log everything, reveal nothing"""
    error_context = ErrorContext(request)
    logger.error(
        f"Unhandled exception {error_context.error_id}: {type(exc).__name__} in {error_context.method} {error_context.endpoint}",
        extra={
            "error_id": error_context.error_id,
            "endpoint": error_context.endpoint,
            "method": error_context.method,
            "client_ip": error_context.client_ip,
            "error_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "An unexpected error occurred. Please try again later.",
            "error_id": error_context.error_id,
            "timestamp": error_context.timestamp.isoformat(),
        },
    )

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
