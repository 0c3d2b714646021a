"""
Unit tests for authentication functionality
"""

import asyncio
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from jose import jwt

from tailoring.auth.auth_handler import auth_handler
from tailoring.config import Settings, ConfigurationError, settings
from tailoring.models.activity_log import ActivityLog
from tailoring.models.customer import Customer
from tailoring.models.user import User
from tailoring.schemas.user import RegisterRequest
from tailoring.services.activity_logger import ActivityLogger
from tailoring.services.user_service import UserService
from tailoring.utils.error_handler import DuplicateIdentity
from conftest import order_payload

def register_payload(**overrides):
    payload = {
        "username": "alice",
        "email": "alice@x.com",
        "password": "Secret123!",
        "firstName": "Alice",
        "lastName": "Liddell",
        "phone": "+15550001111",
    }
    payload.update(overrides)
    return payload

class TestUserRegistration:
    """Test cases for user registration"""

    def test_register_success(self, client, db_session):
        """Registration creates a customer, a linked user and returns a token"""
        response = client.post("/api/auth/register", json=register_payload())
        assert response.status_code == 200

        data = response.json()
        assert data["username"] == "alice"
        assert data["email"] == "alice@x.com"
        assert data["role"] == "Customer"
        assert data["customerId"] is not None
        assert data["token"]
        assert "expiresAt" in data

        customer = db_session.query(Customer).filter(Customer.id == data["customerId"]).first()
        assert customer.first_name == "Alice"
        assert customer.phone == "+15550001111"
        user = db_session.query(User).filter(User.username == "alice").first()
        assert user.customer_id == customer.id
        assert user.password_hash != "Secret123!"

    def test_register_duplicate_username(self, client):
        """Registering the same username twice fails the second time"""
        assert client.post("/api/auth/register", json=register_payload()).status_code == 200

        response = client.post("/api/auth/register", json=register_payload(email="other@x.com"))
        assert response.status_code == 400
        assert response.json()["message"] == "Username already exists"

    def test_register_duplicate_username_case_insensitive(self, client):
        assert client.post("/api/auth/register", json=register_payload()).status_code == 200

        response = client.post("/api/auth/register", json=register_payload(username="ALICE", email="other@x.com"))
        assert response.status_code == 400
        assert "Username" in response.json()["message"]

    def test_register_duplicate_email_case_insensitive(self, client):
        """'Admin@x.com' conflicts with 'admin@x.com'"""
        first = register_payload(username="first", email="admin@x.com")
        assert client.post("/api/auth/register", json=first).status_code == 200

        second = register_payload(username="second", email="Admin@x.com")
        response = client.post("/api/auth/register", json=second)
        assert response.status_code == 400
        assert response.json()["message"] == "Email already exists"

    def test_register_lowercases_email(self, client):
        response = client.post("/api/auth/register", json=register_payload(email="Alice@X.com"))
        assert response.status_code == 200
        assert response.json()["email"] == "alice@x.com"

    def test_register_links_existing_customer_record(self, client, make_customer):
        """A customer the shop already recorded is reused rather than duplicated"""
        customer = make_customer(first_name="Alice", last_name="Liddell", email="alice@x.com")

        response = client.post("/api/auth/register", json=register_payload())
        assert response.status_code == 200
        assert response.json()["customerId"] == customer.id

    def test_register_validation_errors(self, client):
        """Missing fields are reported as a 400 with itemized errors"""
        response = client.post("/api/auth/register", json={"username": "bob"})
        assert response.status_code == 400

        data = response.json()
        assert data["message"] == "Validation failed"
        assert any("password" in error for error in data["errors"])

    def test_register_invalid_email(self, client):
        response = client.post("/api/auth/register", json=register_payload(email="not-an-email"))
        assert response.status_code == 400

    def test_register_is_audited(self, client, db_session):
        client.post("/api/auth/register", json=register_payload())

        entries = db_session.query(ActivityLog).filter(ActivityLog.endpoint == "/api/auth/register").all()
        assert len(entries) == 1
        assert entries[0].status_code == 200
        assert entries[0].username == "alice"

class TestUserLogin:
    """Test cases for user login"""

    @pytest.fixture(autouse=True)
    def registered_user(self, client):
        response = client.post("/api/auth/register", json=register_payload())
        assert response.status_code == 200

    def test_login_with_username(self, client):
        response = client.post("/api/auth/login", json={"username": "alice", "password": "Secret123!"})
        assert response.status_code == 200

        data = response.json()
        assert data["username"] == "alice"
        assert data["role"] == "Customer"
        assert data["token"]

    def test_login_with_email(self, client):
        response = client.post("/api/auth/login", json={"username": " alice@x.com ", "password": "Secret123!"})
        assert response.status_code == 200
        assert response.json()["email"] == "alice@x.com"

    def test_login_expiry_is_seven_days(self, client):
        before = datetime.now(timezone.utc)
        response = client.post("/api/auth/login", json={"username": "alice", "password": "Secret123!"})
        expires_at = datetime.fromisoformat(response.json()["expiresAt"].replace("Z", "+00:00"))

        assert timedelta(days=7) - timedelta(minutes=1) < expires_at - before < timedelta(days=7) + timedelta(minutes=1)

    def test_login_wrong_password(self, client):
        response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password"

    def test_login_nonexistent_user(self, client):
        """Unknown user and wrong password are indistinguishable"""
        response = client.post("/api/auth/login", json={"username": "nobody", "password": "Secret123!"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password"

    def test_failed_login_is_audited(self, client, db_session):
        client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})

        entry = db_session.query(ActivityLog).filter(ActivityLog.endpoint == "/api/auth/login").one()
        assert entry.status_code == 401
        assert entry.error_message == "Failed login attempt"

    def test_recent_activity_newest_first(self, client, db_session):
        client.post("/api/auth/login", json={"username": "alice", "password": "wrong"})
        client.post("/api/auth/login", json={"username": "alice", "password": "Secret123!"})

        recent = ActivityLogger(db_session).get_recent_activities(limit=2)
        assert [entry.status_code for entry in recent] == [200, 401]
        assert all(entry.endpoint == "/api/auth/login" for entry in recent)

class TestTokens:
    """Test cases for token issuance and validation"""

    def setup_method(self):
        self.user = SimpleNamespace(id=7, username="alice", email="alice@x.com", role="Customer", customer_id=3)

    def test_token_claims(self):
        token, _ = auth_handler.create_access_token(self.user)
        payload = auth_handler.verify_token(token)

        assert payload["sub"] == "alice"
        assert payload["name"] == "alice"
        assert payload["email"] == "alice@x.com"
        assert payload["role"] == "Customer"
        assert payload["UserId"] == "7"
        assert payload["CustomerId"] == "3"
        assert payload["iss"] == settings.jwt_issuer
        assert payload["aud"] == settings.jwt_audience

    def test_customer_id_claim_empty_when_unlinked(self):
        self.user.customer_id = None
        token, _ = auth_handler.create_access_token(self.user)
        assert auth_handler.verify_token(token)["CustomerId"] == ""

    def test_token_valid_just_before_expiry(self):
        lifetime = timedelta(days=settings.access_token_expire_days)
        issued_at = datetime.now(timezone.utc) - lifetime + timedelta(seconds=1)
        token, expires_at = auth_handler.create_access_token(self.user, issued_at=issued_at)

        assert expires_at > datetime.now(timezone.utc)
        assert auth_handler.verify_token(token)["sub"] == "alice"

    def test_token_rejected_just_after_expiry(self):
        """Zero clock-skew tolerance"""
        lifetime = timedelta(days=settings.access_token_expire_days)
        issued_at = datetime.now(timezone.utc) - lifetime - timedelta(seconds=1)
        token, _ = auth_handler.create_access_token(self.user, issued_at=issued_at)

        with pytest.raises(HTTPException) as exc_info:
            auth_handler.verify_token(token)
        assert exc_info.value.status_code == 401

    def test_token_with_wrong_audience_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "alice", "iss": settings.jwt_issuer, "aud": "SomeoneElse", "exp": now + timedelta(hours=1)},
            settings.require_jwt_secret(),
            algorithm="HS256",
        )
        with pytest.raises(HTTPException):
            auth_handler.verify_token(token)

    def test_token_with_wrong_issuer_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "alice", "iss": "Elsewhere", "aud": settings.jwt_audience, "exp": now + timedelta(hours=1)},
            settings.require_jwt_secret(),
            algorithm="HS256",
        )
        with pytest.raises(HTTPException):
            auth_handler.verify_token(token)

    def test_token_with_wrong_signature_rejected(self):
        token, _ = auth_handler.create_access_token(self.user)
        forged = jwt.encode(jwt.get_unverified_claims(token), "not-the-real-key", algorithm="HS256")
        with pytest.raises(HTTPException):
            auth_handler.verify_token(forged)

    def test_missing_signing_key_fails_fast(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            Settings().require_jwt_secret()

class TestAuthenticatedEndpoints:
    """Test cases for authenticated endpoints"""

    def setup_method(self):
        self.credentials = {"username": "alice", "password": "Secret123!"}

    def test_validate_token(self, client):
        client.post("/api/auth/register", json=register_payload())
        token = client.post("/api/auth/login", json=self.credentials).json()["token"]

        response = client.get("/api/auth/validate", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json() == {"valid": True, "username": "alice", "role": "Customer"}

    def test_unauthorized_access(self, client):
        """Test access without token"""
        response = client.get("/api/auth/validate")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_invalid_token(self, client):
        """Test access with invalid token"""
        response = client.get("/api/auth/validate", headers={"Authorization": "Bearer invalid_token"})
        assert response.status_code == 401
        assert "message" in response.json()

    def test_register_login_then_list_orders(self, client):
        """End to end: a freshly registered user can list orders"""
        assert client.post("/api/auth/register", json=register_payload()).status_code == 200
        login = client.post("/api/auth/login", json=self.credentials)
        assert login.status_code == 200

        response = client.get("/api/orders", headers={"Authorization": f"Bearer {login.json()['token']}"})
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_customer_cannot_create_orders(self, client, customer_headers):
        response = client.post("/api/orders", json=order_payload(customerId=1), headers=customer_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Operation not permitted"

class TestAdminBootstrap:
    """Test cases for the configured admin account"""

    def test_ensure_admin_creates_once(self, db_session):
        service = UserService(db_session)
        admin = asyncio.run(service.ensure_admin("owner", "Owner@Shop.com", "owner-pass"))
        again = asyncio.run(service.ensure_admin("owner", "owner@shop.com", "owner-pass"))

        assert admin.id == again.id
        assert admin.role == "Admin"
        assert admin.email == "owner@shop.com"
        assert admin.customer_id is None

    def test_ensure_admin_refuses_customer_account(self, db_session, make_user):
        """A Customer holding the configured name is neither returned nor promoted"""
        make_user(username="owner", email="owner@x.com", role="Customer")

        with pytest.raises(DuplicateIdentity) as exc_info:
            asyncio.run(UserService(db_session).ensure_admin("owner", "owner@shop.com", "owner-pass"))
        assert exc_info.value.field == "Username"

        db_session.expire_all()
        assert db_session.query(User).filter(User.username == "owner").one().role == "Customer"

    def test_admin_can_log_in(self, client, db_session):
        asyncio.run(UserService(db_session).ensure_admin("owner", "owner@shop.com", "owner-pass"))

        response = client.post("/api/auth/login", json={"username": "owner", "password": "owner-pass"})
        assert response.status_code == 200
        assert response.json()["role"] == "Admin"
        assert response.json()["customerId"] is None

    def test_register_service_raises_duplicate(self, db_session):
        service = UserService(db_session)
        asyncio.run(service.register(RegisterRequest(**register_payload())))

        with pytest.raises(DuplicateIdentity) as exc_info:
            asyncio.run(service.register(RegisterRequest(**register_payload(username="alice2"))))
        assert exc_info.value.field == "Email"
