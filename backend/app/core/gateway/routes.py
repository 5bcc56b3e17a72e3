"""
Gateway route classifier: map a request path to the posture it requires.

Route entries:
- "/" matches only the root path.
- An entry ending in "*" is a raw prefix ("/docs*" matches "/docs", "/docs-v2").
- Any other entry matches the path exactly or as a path-segment prefix
  ("/about" matches "/about" and "/about/team", not "/aboutus").

Protected-API prefixes win over public entries, so an API route always gets
401 semantics even when a broader public prefix also covers it. Everything
else defaults to a protected page.
"""

from collections.abc import Iterable
from enum import Enum

from app.core.gateway.errors import ConfigurationError


class Posture(str, Enum):
    """Required authorization level for a route."""

    PUBLIC = "public"
    PROTECTED_PAGE = "protected_page"
    PROTECTED_API = "protected_api"


def _normalize_path(path: str) -> str:
    path = (path or "").strip() or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def route_matches(entry: str, path: str) -> bool:
    """True if ``path`` is covered by the route ``entry`` (see module docstring)."""
    if entry.endswith("*"):
        return path.startswith(entry[:-1])
    base = _normalize_path(entry)
    if base == "/":
        return path == "/"
    return path == base or path.startswith(base + "/")


class RouteClassifier:
    """Immutable classifier built once from the gateway route configuration."""

    def __init__(
        self,
        public_routes: Iterable[str],
        protected_api_routes: Iterable[str],
        auth_pages: Iterable[str] = (),
    ) -> None:
        self._public = tuple(public_routes)
        self._protected_api = tuple(protected_api_routes)
        self._auth_pages = tuple(auth_pages)
        for entry in self._public:
            if entry.endswith("*"):
                continue
            literal = _normalize_path(entry)
            if self._is_protected_api(literal):
                raise ConfigurationError(
                    f"Public route {entry!r} is covered by a protected API prefix"
                )

    @property
    def public_routes(self) -> tuple[str, ...]:
        return self._public

    def _is_protected_api(self, path: str) -> bool:
        return any(route_matches(e, path) for e in self._protected_api)

    def _is_public(self, path: str) -> bool:
        return any(route_matches(e, path) for e in self._public)

    def classify(self, path: str) -> Posture:
        path = _normalize_path(path)
        if self._is_protected_api(path):
            return Posture.PROTECTED_API
        if self._is_public(path):
            return Posture.PUBLIC
        return Posture.PROTECTED_PAGE

    def is_auth_page(self, path: str) -> bool:
        """Sign-in / sign-up pages (a signed-in user is sent to the dashboard)."""
        path = _normalize_path(path)
        return any(route_matches(e, path) for e in self._auth_pages)
