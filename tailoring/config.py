"""
Application settings for the Tailoring API
Values come from the environment (optionally a .env file loaded in main.py)
"""

import os
from typing import Optional, List


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing"""


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Environment-backed settings, read once per process"""

    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./tailoring.db")

        # JWT
        self.jwt_secret_key: Optional[str] = os.getenv("JWT_SECRET_KEY") or None
        self.jwt_issuer = os.getenv("JWT_ISSUER", "TailoringApp")
        self.jwt_audience = os.getenv("JWT_AUDIENCE", "TailoringAppUsers")
        self.jwt_algorithm = "HS256"
        self.access_token_expire_days = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))

        self.rate_limit_enabled = _get_bool("RATE_LIMIT_ENABLED", True)
        self.enforce_status_transitions = _get_bool("ENFORCE_STATUS_TRANSITIONS", False)

        # Bootstrap admin account
        self.admin_username = os.getenv("ADMIN_USERNAME")
        self.admin_email = os.getenv("ADMIN_EMAIL")
        self.admin_password = os.getenv("ADMIN_PASSWORD")

        self.cors_origins: List[str] = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ]
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    def require_jwt_secret(self) -> str:
        """Return the signing key or refuse to continue without one"""
        if not self.jwt_secret_key:
            raise ConfigurationError(
                "JWT_SECRET_KEY is not set; refusing to issue or validate tokens"
            )
        return self.jwt_secret_key

    @property
    def admin_bootstrap_enabled(self) -> bool:
        return bool(self.admin_username and self.admin_email and self.admin_password)


settings = Settings()
