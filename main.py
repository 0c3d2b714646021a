"""
Tailoring Shop Management API
Customers, orders, measurements and order progress behind JWT authentication
"""

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import uvicorn
from contextlib import asynccontextmanager
import logging
from datetime import datetime

# Import our modules
from tailoring.config import settings
from tailoring.database import engine, Base, SessionLocal
from tailoring.models import activity_log, customer, measurement, order, user  # noqa: F401 - register tables
from tailoring.routers import auth, customers, orders
from tailoring.services.user_service import UserService
from tailoring.utils.error_handler import register_exception_handlers
from tailoring.utils.rate_limiter import limiter

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

async def bootstrap_admin():
    """Create the Admin account named in the environment, if any"""
    if not settings.admin_bootstrap_enabled:
        logger.info("ADMIN_USERNAME/ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin bootstrap")
        return

    db = SessionLocal()
    try:
        await UserService(db).ensure_admin(
            settings.admin_username, settings.admin_email, settings.admin_password
        )
    finally:
        db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management"""
    # Startup; refuse to serve without a signing key
    settings.require_jwt_secret()
    logger.info("Starting Tailoring API...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")
    await bootstrap_admin()

    yield

    # Shutdown
    logger.info("Shutting down Tailoring API...")

# Create FastAPI app
app = FastAPI(
    title="Tailoring Shop Management API",
    description="REST API for a tailoring shop: customers, orders, measurements and order progress",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(orders.router, prefix="/api/orders", tags=["orders"])
app.include_router(customers.router, prefix="/api/customers", tags=["customers"])

@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """Root endpoint with API information - publicly accessible"""
    return {
        "message": "Tailoring Shop Management API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "timestamp": datetime.utcnow().isoformat()
    }

@app.get("/health")
@limiter.limit("30/minute")
async def health_check(request: Request):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
