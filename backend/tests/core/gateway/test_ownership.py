"""Unit tests for the ownership registry."""

import pytest

from app.core.config import settings
from app.core.gateway.errors import ConfigurationError, InvalidRequest
from app.core.gateway.ownership import UNOWNED, OwnedByColumn, OwnershipRegistry
from tests.utils.store import InMemoryTableStore


def test_default_config_ideas_owned_by_user_id() -> None:
    reg = OwnershipRegistry.from_config(settings.GATEWAY_RESOURCE_TABLES)
    assert reg.policy_for("ideas") == OwnedByColumn("user_id")
    assert reg.policy_for("blueprints") is UNOWNED


def test_unknown_table_is_invalid_request() -> None:
    reg = OwnershipRegistry.from_config({"ideas": "user_id"})
    with pytest.raises(InvalidRequest):
        reg.policy_for("users")


def test_new_owned_table_is_configuration_only() -> None:
    reg = OwnershipRegistry.from_config({"ideas": "user_id", "notes": "owner_id"})
    assert reg.policy_for("notes") == OwnedByColumn("owner_id")
    assert reg.tables == ("ideas", "notes")


def test_empty_owner_column_rejected() -> None:
    with pytest.raises(ConfigurationError):
        OwnershipRegistry.from_config({"ideas": "  "})


def test_validate_against_store_ok() -> None:
    reg = OwnershipRegistry.from_config(settings.GATEWAY_RESOURCE_TABLES)
    reg.validate(InMemoryTableStore())


def test_validate_missing_table_fails() -> None:
    reg = OwnershipRegistry.from_config({"ideas": "user_id", "ghosts": None})
    with pytest.raises(ConfigurationError, match="ghosts"):
        reg.validate(InMemoryTableStore())


def test_validate_missing_owner_column_fails() -> None:
    reg = OwnershipRegistry.from_config({"blueprints": "user_id"})
    with pytest.raises(ConfigurationError, match="user_id"):
        reg.validate(InMemoryTableStore())
