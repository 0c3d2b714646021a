"""
Salted HMAC-SHA512 password hashing

Stored format: base64(salt) + ":" + base64(digest)
"""

import base64
import binascii
import hashlib
import hmac
import secrets

# HMAC-SHA512 block size; keys of this length are used as-is
SALT_SIZE = 128


class PasswordHasher:
    """Hashes and verifies passwords with a random per-credential key"""

    def __init__(self, salt_size: int = SALT_SIZE):
        self.salt_size = salt_size

    def hash(self, password: str) -> str:
        salt = secrets.token_bytes(self.salt_size)
        digest = hmac.new(salt, password.encode("utf-8"), hashlib.sha512).digest()
        return base64.b64encode(salt).decode("ascii") + ":" + base64.b64encode(digest).decode("ascii")

    def verify(self, password: str, stored_hash: str) -> bool:
        """Check a password against a stored value; malformed values never match"""
        if not stored_hash or password is None:
            return False

        parts = stored_hash.split(":")
        if len(parts) != 2:
            return False

        try:
            salt = base64.b64decode(parts[0], validate=True)
            expected = base64.b64decode(parts[1], validate=True)
        except (binascii.Error, ValueError):
            return False

        computed = hmac.new(salt, password.encode("utf-8"), hashlib.sha512).digest()
        return hmac.compare_digest(computed, expected)


password_hasher = PasswordHasher()
