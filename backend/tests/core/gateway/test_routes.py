"""Unit tests for the gateway route classifier."""

import pytest

from app.core.config import settings
from app.core.gateway.errors import ConfigurationError
from app.core.gateway.routes import Posture, RouteClassifier, route_matches


def _classifier() -> RouteClassifier:
    return RouteClassifier(
        settings.GATEWAY_PUBLIC_ROUTES,
        settings.GATEWAY_PROTECTED_API_ROUTES,
        settings.GATEWAY_AUTH_PAGES,
    )


# --- route_matches ---


def test_route_matches_exact_and_segment_prefix() -> None:
    assert route_matches("/about", "/about")
    assert route_matches("/about", "/about/team")
    assert not route_matches("/about", "/aboutus")


def test_route_matches_root_only_matches_root() -> None:
    assert route_matches("/", "/")
    assert not route_matches("/", "/dashboard")


def test_route_matches_star_is_raw_prefix() -> None:
    assert route_matches("/docs*", "/docs")
    assert route_matches("/docs*", "/docs-v2/page")
    assert not route_matches("/docs*", "/doc")


# --- classify ---


def test_every_configured_public_route_is_public() -> None:
    c = _classifier()
    for entry in settings.GATEWAY_PUBLIC_ROUTES:
        assert c.classify(entry) is Posture.PUBLIC, entry


def test_public_subpaths_are_public() -> None:
    c = _classifier()
    assert c.classify("/about/team") is Posture.PUBLIC
    assert c.classify("/sign-in/factor-one") is Posture.PUBLIC
    assert c.classify("/api/auth/callback") is Posture.PUBLIC


def test_protected_api_routes() -> None:
    c = _classifier()
    assert c.classify("/api/database") is Posture.PROTECTED_API
    assert c.classify("/api/generate") is Posture.PROTECTED_API
    assert c.classify("/api/database/") is Posture.PROTECTED_API


def test_unknown_paths_default_to_protected_page() -> None:
    c = _classifier()
    assert c.classify("/dashboard") is Posture.PROTECTED_PAGE
    assert c.classify("/idea/123") is Posture.PROTECTED_PAGE
    assert c.classify("/aboutus") is Posture.PROTECTED_PAGE
    assert c.classify("") is Posture.PUBLIC  # empty path is the root


def test_protected_api_wins_over_broader_public_prefix() -> None:
    c = RouteClassifier(["/api*"], ["/api/database"])
    assert c.classify("/api/database") is Posture.PROTECTED_API
    assert c.classify("/api/other") is Posture.PUBLIC


def test_literal_public_route_under_protected_api_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        RouteClassifier(["/api/database/export"], ["/api/database"])


def test_is_auth_page() -> None:
    c = _classifier()
    assert c.is_auth_page("/sign-in")
    assert c.is_auth_page("/sign-up/verify")
    assert not c.is_auth_page("/dashboard")
    assert not c.is_auth_page("/sign-inx")
