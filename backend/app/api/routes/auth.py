"""
Sign-in callback: GET /api/auth/callback?redirect=<path>.

The identity provider completes the sign-in and sets its session cookie before
sending the browser here; this route only forwards it. Redirect targets are
limited to local paths.
"""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from app.core.config import settings

router = APIRouter(prefix="/auth", tags=["auth"])


def safe_redirect_target(target: str | None) -> str:
    """Local absolute path from ``target``, or the dashboard."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return settings.DASHBOARD_PATH
    if "\\" in target:
        return settings.DASHBOARD_PATH
    return target


@router.get("/callback")
async def auth_callback(redirect: str | None = None) -> RedirectResponse:
    return RedirectResponse(safe_redirect_target(redirect), status_code=307)
