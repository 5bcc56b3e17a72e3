"""
Ownership policy: which resource tables are scoped to a user, and by which column.

Ownership is data: each registered table carries its mode, so adding an owned
table is a configuration entry (Settings.GATEWAY_RESOURCE_TABLES) and needs no
change in the dispatcher or the query composer. Only registered tables are
reachable through the data endpoint.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

from app.core.gateway.errors import ConfigurationError, InvalidRequest


@dataclass(frozen=True)
class Unowned:
    """Rows are not scoped to a user."""


@dataclass(frozen=True)
class OwnedByColumn:
    """Rows belong to the identity stored in ``column``."""

    column: str


OwnershipMode = Unowned | OwnedByColumn

UNOWNED = Unowned()


class _HasColumns(Protocol):
    def columns(self, table: str) -> frozenset[str]: ...


class OwnershipRegistry:
    def __init__(self, tables: Mapping[str, OwnershipMode]) -> None:
        self._tables: dict[str, OwnershipMode] = dict(tables)

    @classmethod
    def from_config(cls, config: Mapping[str, str | None]) -> "OwnershipRegistry":
        """Build from ``{table: owner_column_or_None}``."""
        tables: dict[str, OwnershipMode] = {}
        for table, column in config.items():
            if not table or not table.strip():
                raise ConfigurationError("Resource table name must not be empty")
            if column is None:
                tables[table] = UNOWNED
            elif not column.strip():
                raise ConfigurationError(f"Owner column for {table!r} must not be empty")
            else:
                tables[table] = OwnedByColumn(column=column.strip())
        return cls(tables)

    @property
    def tables(self) -> tuple[str, ...]:
        return tuple(self._tables)

    def policy_for(self, table: str) -> OwnershipMode:
        try:
            return self._tables[table]
        except KeyError:
            raise InvalidRequest(f"Unknown table: {table}") from None

    def validate(self, store: _HasColumns) -> None:
        """
        Check the registry against the store at startup.

        Every registered table must exist and every owner column must be one of
        its columns; otherwise the process must not start serving.
        """
        for table, mode in self._tables.items():
            try:
                columns = store.columns(table)
            except Exception as e:
                raise ConfigurationError(
                    f"Resource table {table!r} is not available in the store: {e}"
                ) from e
            if isinstance(mode, OwnedByColumn) and mode.column not in columns:
                raise ConfigurationError(
                    f"Owner column {mode.column!r} does not exist on table {table!r}"
                )
