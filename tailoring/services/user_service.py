"""
User service for registration, login and account bootstrap
Handles all authentication business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from datetime import datetime
from typing import Optional
import logging

from tailoring.models.user import User
from tailoring.models.customer import Customer
from tailoring.models.enums import UserRole
from tailoring.schemas.user import RegisterRequest, LoginRequest, AuthResponse
from tailoring.auth.auth_handler import AuthHandler
from tailoring.utils.error_handler import DuplicateIdentity, InvalidCredentials, transaction

logger = logging.getLogger(__name__)

class UserService:
    """Service for user account operations"""

    def __init__(self, db: Session):
        self.db = db
        self.auth_handler = AuthHandler()

    def _find_conflicts(self, username: str, email: str) -> list:
        return self.db.query(User).filter(
            or_(
                func.lower(User.username) == username.lower(),
                func.lower(User.email) == email.lower()
            )
        ).all()

    def _build_auth_response(self, user: User, issued_at: Optional[datetime] = None) -> AuthResponse:
        token, expires_at = self.auth_handler.create_access_token(user, issued_at=issued_at)
        return AuthResponse(
            token=token,
            username=user.username,
            email=user.email,
            role=user.role,
            customer_id=user.customer_id,
            expires_at=expires_at
        )

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Create a customer record and a linked Customer-role user, then issue a token"""
        username = data.username.strip()
        email = data.email.strip().lower()

        for existing_user in self._find_conflicts(username, email):
            if existing_user.username.lower() == username.lower():
                raise DuplicateIdentity("Username")
            if existing_user.email.lower() == email:
                raise DuplicateIdentity("Email")

        with transaction(self.db):
            # Reuse a customer the shop already recorded under this email
            customer = self.db.query(Customer).filter(func.lower(Customer.email) == email).first()
            if customer is not None and customer.user is not None:
                raise DuplicateIdentity("Email")

            if customer is None:
                customer = Customer(
                    first_name=data.first_name.strip(),
                    last_name=data.last_name.strip(),
                    email=email,
                    phone=(data.phone or "").strip(),
                    address=""
                )
                self.db.add(customer)
                self.db.flush()

            user = User(
                username=username,
                email=email,
                password_hash=self.auth_handler.get_password_hash(data.password),
                first_name=data.first_name.strip(),
                last_name=data.last_name.strip(),
                phone=(data.phone or "").strip(),
                role=UserRole.CUSTOMER.value,
                customer_id=customer.id
            )
            self.db.add(user)

        self.db.refresh(user)
        logger.info(f"Registered user {user.username} linked to customer {user.customer_id}")
        return self._build_auth_response(user)

    async def authenticate_user(self, identifier: str, password: str) -> User:
        """Find a user by username or email and check the password"""
        identifier = (identifier or "").strip()
        if not identifier:
            raise InvalidCredentials()

        user = self.db.query(User).filter(
            or_(
                func.lower(User.username) == identifier.lower(),
                func.lower(User.email) == identifier.lower()
            )
        ).first()

        if not user:
            logger.warning(f"Login attempt with unknown identifier: {identifier}")
            raise InvalidCredentials()

        if not self.auth_handler.verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for user: {user.username}")
            raise InvalidCredentials()

        logger.info(f"Successful login for user: {user.username}")
        return user

    async def login(self, data: LoginRequest) -> AuthResponse:
        user = await self.authenticate_user(data.username, data.password)
        return self._build_auth_response(user)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        return self.db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()

    async def ensure_admin(self, username: str, email: str, password: str) -> User:
        """Create the configured Admin account unless it already exists"""
        existing = await self.get_user_by_username(username)
        if existing:
            if existing.role != UserRole.ADMIN.value:
                logger.warning(
                    f"Configured admin username {username} belongs to a {existing.role} account; not promoting it"
                )
                raise DuplicateIdentity("Username")
            return existing

        email = email.strip().lower()
        if self.db.query(User).filter(func.lower(User.email) == email).first():
            raise DuplicateIdentity("Email")

        with transaction(self.db):
            admin = User(
                username=username.strip(),
                email=email,
                password_hash=self.auth_handler.get_password_hash(password),
                first_name="Admin",
                last_name="User",
                phone="",
                role=UserRole.ADMIN.value
            )
            self.db.add(admin)

        self.db.refresh(admin)
        logger.info(f"Created admin account: {admin.username}")
        return admin
