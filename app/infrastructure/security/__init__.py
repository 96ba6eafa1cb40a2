"""Security: password hashing for tenant users."""

from app.infrastructure.security.password import (
    generate_temporary_password,
    get_password_hash,
    verify_password,
)

__all__ = [
    "generate_temporary_password",
    "get_password_hash",
    "verify_password",
]
