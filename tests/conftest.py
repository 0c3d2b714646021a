"""
Shared fixtures: in-memory database, API client and record factories
"""

import os

# Settings are read at import time, so the environment must be ready first
os.environ["JWT_SECRET_KEY"] = "test-signing-key-for-the-tailoring-api-suite-0123456789"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENFORCE_STATUS_TRANSITIONS"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tailoring.database import Base, get_db
from tailoring.auth.auth_handler import auth_handler
from tailoring.models.customer import Customer
from tailoring.models.enums import OrderStatus, UserRole
from tailoring.models.order import Order
from tailoring.models.user import User
from tailoring.services.order_service import utc_today
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def make_user(db_session):
    def _make_user(username="admin", email="admin@tailoring.com", password="admin123",
                   role=UserRole.ADMIN.value, customer_id=None):
        user = User(
            username=username,
            email=email,
            password_hash=auth_handler.get_password_hash(password),
            first_name="Test",
            last_name="User",
            phone="",
            role=role,
            customer_id=customer_id,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user

@pytest.fixture
def admin_headers(make_user):
    token, _ = auth_handler.create_access_token(make_user())
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def customer_headers(make_user):
    token, _ = auth_handler.create_access_token(
        make_user(username="shopper", email="shopper@x.com", role=UserRole.CUSTOMER.value)
    )
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def make_customer(db_session):
    def _make_customer(first_name="John", last_name="Doe", email="john.doe@email.com"):
        customer = Customer(first_name=first_name, last_name=last_name, email=email, phone="+1234567890", address="")
        db_session.add(customer)
        db_session.commit()
        db_session.refresh(customer)
        return customer
    return _make_customer

@pytest.fixture
def make_order(db_session):
    counter = {"n": 0}

    def _make_order(customer, **overrides):
        counter["n"] += 1
        values = {
            "customer_id": customer.id,
            "order_number": f"ORD-TEST-{counter['n']:04d}",
            "garment_type": "Shirt",
            "fabric_type": "Cotton",
            "order_date": datetime(2026, 1, 1) + timedelta(hours=counter["n"]),
            "due_date": utc_today() + timedelta(days=14),
            "total_amount": Decimal("100.00"),
            "advance_paid": Decimal("0.00"),
            "status": OrderStatus.PENDING.value,
            "priority": 3,
        }
        values.update(overrides)
        order = Order(**values)
        db_session.add(order)
        db_session.commit()
        db_session.refresh(order)
        return order
    return _make_order

def order_payload(**overrides):
    payload = {
        "garmentType": "Suit",
        "fabricType": "Wool",
        "styleDetails": "Two-piece, notch lapel",
        "specialInstructions": "Extra buttons",
        "dueDate": (utc_today() + timedelta(days=10)).isoformat(),
        "totalAmount": 500,
        "advancePaid": 200,
        "priority": 2,
    }
    payload.update(overrides)
    return payload
