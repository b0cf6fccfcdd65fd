"""Bearer token handling.

Tokens are issued by the identity service; this module only verifies them and
reads the subject (the acting user id). create_access_token exists for
scripts and tests that need a locally signed token.
"""

from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings
from app.shared.utils.datetime import utc_now

DEFAULT_TOKEN_TTL = timedelta(minutes=30)


def create_access_token(
    subject: str,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """Sign a token for subject with the configured secret and algorithm."""
    settings = get_settings()
    to_encode: dict[str, Any] = {
        **claims,
        "sub": subject,
        "exp": utc_now() + (expires_delta or DEFAULT_TOKEN_TTL),
    }
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If token is invalid, expired, or missing exp/sub.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not payload.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return payload


def get_token_subject(token: str) -> str:
    """Return the sub claim of a verified token (the acting user id)."""
    return str(verify_token(token)["sub"])
