"""
Gateway error taxonomy.

Every failure the gateway can return maps to exactly one of these classes and
one HTTP status. Unauthenticated (log in) and Forbidden (not yours) are never
merged. app.main turns any GatewayError into ``{"error": message}``.
"""


class ConfigurationError(RuntimeError):
    """Static gateway configuration is inconsistent; raised at startup."""


class GatewayError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(GatewayError):
    status_code = 401


class Forbidden(GatewayError):
    status_code = 403


class InvalidRequest(GatewayError):
    status_code = 400


class ExternalFailure(GatewayError):
    """A collaborator (table store, identity service, AI provider) failed."""

    status_code = 500
