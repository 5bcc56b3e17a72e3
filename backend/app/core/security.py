from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.core.config import settings


ALGORITHM = "HS256"

# Role claim the identity provider puts on end-user access tokens
ROLE_AUTHENTICATED = "authenticated"

# ---------------------------------------------------------------------------
# JWT helpers (session tokens issued by the identity provider)
# ---------------------------------------------------------------------------


def create_session_token(
    subject: str | Any,
    expires_delta: timedelta,
    email: str | None = None,
) -> str:
    """Mint a provider-compatible access token (local development and tests)."""
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode: dict[str, Any] = {
        "exp": expire,
        "sub": str(subject),
        "role": ROLE_AUTHENTICATED,
    }
    if settings.AUTH_JWT_AUDIENCE:
        to_encode["aud"] = settings.AUTH_JWT_AUDIENCE
    if email:
        to_encode["email"] = email
    return jwt.encode(to_encode, settings.AUTH_JWT_SECRET, algorithm=ALGORITHM)


def decode_session_token(token: str) -> dict[str, Any]:
    """
    Verify signature, expiry and audience of a session token.

    Raises ``jwt.InvalidTokenError`` (or a subclass) on any problem.
    """
    options = {"verify_exp": True, "verify_aud": bool(settings.AUTH_JWT_AUDIENCE)}
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[ALGORITHM],
        audience=settings.AUTH_JWT_AUDIENCE,
        options=options,
    )
