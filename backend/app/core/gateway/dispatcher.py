"""
Gateway dispatcher: one authorization decision per request.

Flow (terminal on the first applicable outcome):
  classify -> Public (not an auth page): allow, no session lookup
           -> verify session
           -> ProtectedAPI, no identity:  401 {"error": "Unauthorized access"}
           -> ProtectedPage, no identity: redirect to sign-in with ?redirect=<path>
           -> identity on sign-in/sign-up: redirect to the dashboard
           -> allow, identity on request.state.identity

Auth pages are public; their session is still looked up so that a signed-in
user never sees the auth forms. Nothing is kept between requests.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.types import ASGIApp

from app.core.gateway.routes import Posture, RouteClassifier
from app.core.gateway.session import Identity, SessionVerifier

_log = logging.getLogger(__name__)


class Outcome(str, Enum):
    ALLOW = "allow"
    UNAUTHORIZED = "unauthorized"
    REDIRECT_TO_SIGN_IN = "redirect_to_sign_in"
    REDIRECT_TO_DASHBOARD = "redirect_to_dashboard"


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    posture: Posture
    identity: Identity | None = None
    location: str | None = None


class GatewayDispatcher:
    def __init__(
        self,
        classifier: RouteClassifier,
        verifier: SessionVerifier,
        *,
        sign_in_path: str = "/sign-in",
        dashboard_path: str = "/dashboard",
    ) -> None:
        self.classifier = classifier
        self.verifier = verifier
        self.sign_in_path = sign_in_path
        self.dashboard_path = dashboard_path

    async def decide(self, request: Request) -> Decision:
        path = request.url.path
        posture = self.classifier.classify(path)
        auth_page = self.classifier.is_auth_page(path)

        if posture is Posture.PUBLIC and not auth_page:
            return Decision(Outcome.ALLOW, posture)

        identity = await self.verifier.verify(request)

        if identity is None:
            if posture is Posture.PROTECTED_API:
                return Decision(Outcome.UNAUTHORIZED, posture)
            if posture is Posture.PROTECTED_PAGE:
                location = f"{self.sign_in_path}?{urlencode({'redirect': path})}"
                return Decision(Outcome.REDIRECT_TO_SIGN_IN, posture, location=location)
            return Decision(Outcome.ALLOW, posture)

        if auth_page:
            return Decision(
                Outcome.REDIRECT_TO_DASHBOARD,
                posture,
                identity=identity,
                location=self.dashboard_path,
            )
        return Decision(Outcome.ALLOW, posture, identity=identity)


def decision_response(decision: Decision) -> Response | None:
    """Terminal response for a decision; None means let the request through."""
    if decision.outcome is Outcome.UNAUTHORIZED:
        return JSONResponse(status_code=401, content={"error": "Unauthorized access"})
    if decision.outcome in (Outcome.REDIRECT_TO_SIGN_IN, Outcome.REDIRECT_TO_DASHBOARD):
        return RedirectResponse(decision.location or "/", status_code=307)
    return None


class GatewayMiddleware(BaseHTTPMiddleware):
    """Applies GatewayDispatcher to every HTTP request."""

    def __init__(self, app: ASGIApp, dispatcher: GatewayDispatcher) -> None:
        super().__init__(app)
        self.dispatcher = dispatcher

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        decision = await self.dispatcher.decide(request)
        response = decision_response(decision)
        if response is not None:
            _log.debug(
                "Gateway %s for %s %s",
                decision.outcome.value,
                request.method,
                request.url.path,
            )
            return response
        request.state.identity = decision.identity
        return await call_next(request)
