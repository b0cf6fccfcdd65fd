"""Security: bearer token verification."""

from app.infrastructure.security.jwt import (
    create_access_token,
    get_token_subject,
    verify_token,
)

__all__ = [
    "create_access_token",
    "get_token_subject",
    "verify_token",
]
