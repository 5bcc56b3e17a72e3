import random
import string
from datetime import timedelta

from app.core.security import create_session_token


def random_lower_string() -> str:
    return "".join(random.choices(string.ascii_lowercase, k=32))


def session_headers(user_id: str, email: str | None = None) -> dict[str, str]:
    """Authorization header carrying a valid session token for ``user_id``."""
    token = create_session_token(
        subject=user_id, expires_delta=timedelta(minutes=5), email=email
    )
    return {"Authorization": f"Bearer {token}"}
