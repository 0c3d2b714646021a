"""
Shared slowapi limiter, keyed on the client address
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tailoring.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

# Per-route budgets
LOGIN_LIMIT = "10/minute"
REGISTER_LIMIT = "5/minute"
WRITE_LIMIT = "30/minute"
READ_LIMIT = "60/minute"
