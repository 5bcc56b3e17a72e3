"""
Authenticated data gateway: route classifier, session verifier, ownership
policy, dispatcher and request/response helpers.

The query composer lives in app.core.gateway.composer and is imported from
there directly (it depends on app.core.store, which depends on filters here).
"""

from app.core.gateway.dispatcher import (
    Decision,
    GatewayDispatcher,
    GatewayMiddleware,
    Outcome,
)
from app.core.gateway.errors import (
    ConfigurationError,
    ExternalFailure,
    Forbidden,
    GatewayError,
    InvalidRequest,
    Unauthenticated,
)
from app.core.gateway.filters import Filter, FilterOperator
from app.core.gateway.ownership import (
    UNOWNED,
    OwnedByColumn,
    OwnershipRegistry,
    Unowned,
)
from app.core.gateway.request_response import (
    error_response,
    make_json_safe,
    read_json_body,
    success_response,
)
from app.core.gateway.routes import Posture, RouteClassifier
from app.core.gateway.session import (
    Identity,
    IdentityProvider,
    JwtIdentityProvider,
    RemoteIdentityProvider,
    SessionVerifier,
)

__all__ = [
    "ConfigurationError",
    "Decision",
    "ExternalFailure",
    "Filter",
    "FilterOperator",
    "Forbidden",
    "GatewayDispatcher",
    "GatewayError",
    "GatewayMiddleware",
    "Identity",
    "IdentityProvider",
    "InvalidRequest",
    "JwtIdentityProvider",
    "Outcome",
    "OwnedByColumn",
    "OwnershipRegistry",
    "Posture",
    "RemoteIdentityProvider",
    "RouteClassifier",
    "SessionVerifier",
    "UNOWNED",
    "Unauthenticated",
    "Unowned",
    "error_response",
    "make_json_safe",
    "read_json_body",
    "success_response",
]
