"""
Token issuance, token validation and role-based access control
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from fastapi import HTTPException, Request, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from tailoring.auth.password_hasher import password_hasher
from tailoring.config import settings
from tailoring.models.enums import UserRole

ADMIN = UserRole.ADMIN.value
CUSTOMER = UserRole.CUSTOMER.value

security = HTTPBearer(auto_error=False)

class AuthHandler:
    """Handles password checks and JWT issuance/validation"""

    def __init__(self):
        self.password_hasher = password_hasher

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its stored hash"""
        return self.password_hasher.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.password_hasher.hash(password)

    def create_access_token(self, user, issued_at: Optional[datetime] = None) -> Tuple[str, datetime]:
        """Create a signed JWT for a user; returns the token and its expiry"""
        issued_at = issued_at or datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(days=settings.access_token_expire_days)

        to_encode = {
            "sub": user.username,
            "name": user.username,
            "email": user.email,
            "role": user.role,
            "UserId": str(user.id),
            "CustomerId": str(user.customer_id) if user.customer_id is not None else "",
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
            "iat": issued_at,
            "exp": expires_at,
        }
        encoded_jwt = jwt.encode(to_encode, settings.require_jwt_secret(), algorithm=settings.jwt_algorithm)
        return encoded_jwt, expires_at

    def verify_token(self, token: str) -> dict:
        """Verify signature, issuer, audience and expiry of a JWT"""
        try:
            payload = jwt.decode(
                token,
                settings.require_jwt_secret(),
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
                issuer=settings.jwt_issuer,
            )
            return payload
        except JWTError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

auth_handler = AuthHandler()

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)):
    """Dependency to get the identity carried by the bearer token"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = auth_handler.verify_token(credentials.credentials)

    username: str = payload.get("sub")
    if username is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    customer_id = payload.get("CustomerId") or None
    return {
        "user_id": int(payload.get("UserId", 0)),
        "username": username,
        "role": payload.get("role", CUSTOMER),
        "email": payload.get("email"),
        "customer_id": int(customer_id) if customer_id else None,
    }

# (method, route template) -> roles allowed; routes not listed only need a valid token
ROUTE_POLICY = {
    ("POST", "/api/orders"): {ADMIN},
    ("PUT", "/api/orders/{order_id}"): {ADMIN},
    ("DELETE", "/api/orders/{order_id}"): {ADMIN},
    ("GET", "/api/customers"): {ADMIN},
    ("POST", "/api/customers"): {ADMIN},
    ("PUT", "/api/customers/{customer_id}"): {ADMIN},
    ("DELETE", "/api/customers/{customer_id}"): {ADMIN},
}

class AccessPolicy:
    """Evaluates the route policy table once per request"""

    def __init__(self, rules: dict):
        self.rules = rules

    def allowed_roles(self, method: str, path: str):
        return self.rules.get((method.upper(), path))

    def __call__(self, request: Request, user: dict = Depends(get_current_user)):
        route = request.scope.get("route")
        path = getattr(route, "path", request.url.path)
        allowed = self.allowed_roles(request.method, path)
        if allowed and user.get("role") not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Operation not permitted"
            )
        return user

require_access = AccessPolicy(ROUTE_POLICY)
