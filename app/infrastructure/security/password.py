"""Password hashing for tenant users (bcrypt with SHA-256 pre-hash).

Bcrypt truncates inputs at 72 bytes; pre-hashing with SHA-256 gives a
fixed-length input so long passphrases keep all their entropy.
"""

import base64
import hashlib
import secrets

import bcrypt

TEMPORARY_PASSWORD_BYTES = 12


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str) -> str:
    """Return the bcrypt hash stored in app_user.hashed_password."""
    return bcrypt.hashpw(_prehash(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bool(bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8")))
    except (ValueError, TypeError):
        return False


def generate_temporary_password() -> str:
    """Random URL-safe password for admins provisioned without one."""
    return secrets.token_urlsafe(TEMPORARY_PASSWORD_BYTES)
