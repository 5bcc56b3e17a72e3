"""
Query composer: turn one ActionDescriptor plus the caller's identity into a
fully-specified, ownership-constrained call against the table store.

Owned tables (OwnedByColumn):
- insert: the owner column is overwritten with the caller's id.
- select: eq(owner, caller) is appended after the caller's filters.
- update / delete: the owner of the target row is read first; a missing row or
  a different owner is Forbidden and no mutation is issued. Update values
  cannot move a row to another owner.

The read and the write are two separate store calls with no transaction
between them; a concurrent change in that window is not detected.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from app.core.gateway.errors import ExternalFailure, Forbidden, InvalidRequest
from app.core.gateway.filters import Filter, build_filter, eq
from app.core.gateway.ownership import OwnedByColumn, OwnershipRegistry
from app.core.gateway.session import Identity
from app.core.store import ID_COLUMN, StoreError, TableStore

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    INSERT = "insert"
    SELECT = "select"
    UPDATE = "update"
    DELETE = "delete"


# ---------------------------------------------------------------------------
# Inbound request shapes: {action, table, data}
# ---------------------------------------------------------------------------


class _FilterIn(BaseModel):
    column: str
    operator: str
    value: Any = None


class _SelectData(BaseModel):
    select: str | None = "*"
    filters: list[_FilterIn] | None = None


class _UpdateData(BaseModel):
    id: str | int
    values: dict[str, Any]


class _DeleteData(BaseModel):
    id: str | int


class _ActionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str
    table: str
    data: dict[str, Any] | None = None


def _validation_message(exc: ValidationError) -> str:
    """Readable one-line summary of a pydantic ValidationError."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []))
        msg = err.get("msg", "Invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages)


def _parse_columns(raw: str | None) -> tuple[str, ...] | None:
    """'*' or None -> all columns; 'id, title' -> ('id', 'title')."""
    if raw is None or raw.strip() in ("", "*"):
        return None
    cols = tuple(c.strip() for c in raw.split(",") if c.strip())
    return cols or None


@dataclass(frozen=True)
class ActionDescriptor:
    """One generic data operation, normalized; lives for one request."""

    table: str
    kind: ActionKind
    payload: dict[str, Any] = field(default_factory=dict)
    filters: tuple[Filter, ...] = ()
    columns: tuple[str, ...] | None = None
    target_id: Any = None

    @classmethod
    def from_request(cls, body: Any) -> "ActionDescriptor":
        """Parse ``{action, table, data}``; any shape problem is InvalidRequest."""
        if not isinstance(body, dict):
            raise InvalidRequest("Request body must be a JSON object")
        try:
            req = _ActionRequest.model_validate(body)
        except ValidationError as e:
            raise InvalidRequest(_validation_message(e)) from None
        try:
            kind = ActionKind(req.action.strip().lower())
        except ValueError:
            raise InvalidRequest("Invalid action") from None
        table = req.table.strip()
        if not table:
            raise InvalidRequest("table is required")
        data = req.data or {}

        try:
            if kind is ActionKind.INSERT:
                if not data:
                    raise InvalidRequest("Insert requires a non-empty data object")
                return cls(table=table, kind=kind, payload=dict(data))
            if kind is ActionKind.SELECT:
                sel = _SelectData.model_validate(data)
                filters = tuple(
                    build_filter(f.column, f.operator, f.value)
                    for f in (sel.filters or [])
                )
                return cls(
                    table=table,
                    kind=kind,
                    filters=filters,
                    columns=_parse_columns(sel.select),
                )
            if kind is ActionKind.UPDATE:
                upd = _UpdateData.model_validate(data)
                if not upd.values:
                    raise InvalidRequest("Update requires non-empty values")
                return cls(
                    table=table, kind=kind, payload=dict(upd.values), target_id=upd.id
                )
            dele = _DeleteData.model_validate(data)
            return cls(table=table, kind=kind, target_id=dele.id)
        except ValidationError as e:
            raise InvalidRequest(_validation_message(e)) from None


class QueryComposer:
    """
    Executes ActionDescriptors for an authenticated identity.

    Collaborators are injected: the table store and the ownership registry.
    """

    def __init__(self, store: TableStore, registry: OwnershipRegistry) -> None:
        self.store = store
        self.registry = registry

    def execute(self, identity: Identity, action: ActionDescriptor) -> Any:
        if identity is None or not identity.id:
            # The dispatcher never lets an anonymous request get here.
            raise Forbidden("Identity required")
        mode = self.registry.policy_for(action.table)
        owner = mode.column if isinstance(mode, OwnedByColumn) else None
        known = self._columns(action)

        if action.kind is ActionKind.INSERT:
            return self._insert(identity, action, owner, known)
        if action.kind is ActionKind.SELECT:
            return self._select(identity, action, owner, known)
        if action.target_id is None or action.target_id == "":
            raise InvalidRequest(f"{action.kind.value} requires an id")
        if action.kind is ActionKind.UPDATE:
            return self._update(identity, action, owner, known)
        return self._delete(identity, action, owner)

    # -- helpers -------------------------------------------------------------

    def _columns(self, action: ActionDescriptor) -> frozenset[str]:
        try:
            return self.store.columns(action.table)
        except StoreError as e:
            raise self._store_failure(action, e) from e

    @staticmethod
    def _check_columns(names: Any, known: frozenset[str], table: str) -> None:
        unknown = sorted(set(names) - known)
        if unknown:
            raise InvalidRequest(
                f"Unknown column(s) for {table}: {', '.join(unknown)}"
            )

    @staticmethod
    def _store_failure(action: ActionDescriptor, e: StoreError) -> ExternalFailure:
        logger.error("%s error on %s: %s", action.kind.value, action.table, e)
        return ExternalFailure(str(e) or "Store operation failed")

    def _assert_owner(
        self, identity: Identity, action: ActionDescriptor, owner: str
    ) -> None:
        """Read the target row's owner; reject unless it is the caller."""
        try:
            rows = self.store.select_where(
                action.table, [owner], [eq(ID_COLUMN, action.target_id)]
            )
        except StoreError as e:
            raise self._store_failure(action, e) from e
        if not rows or rows[0].get(owner) != identity.id:
            logger.warning(
                "Ownership check failed: %s %s id=%s user=%s",
                action.kind.value,
                action.table,
                action.target_id,
                identity.id,
            )
            raise Forbidden("Unauthorized or item not found")

    # -- actions -------------------------------------------------------------

    def _insert(
        self,
        identity: Identity,
        action: ActionDescriptor,
        owner: str | None,
        known: frozenset[str],
    ) -> dict[str, Any]:
        record = dict(action.payload)
        if owner is not None:
            record[owner] = identity.id
        self._check_columns(record, known, action.table)
        try:
            return self.store.insert(action.table, record)
        except StoreError as e:
            raise self._store_failure(action, e) from e

    def _select(
        self,
        identity: Identity,
        action: ActionDescriptor,
        owner: str | None,
        known: frozenset[str],
    ) -> list[dict[str, Any]]:
        self._check_columns(action.columns or (), known, action.table)
        self._check_columns((f.column for f in action.filters), known, action.table)
        filters = list(action.filters)
        if owner is not None:
            filters.append(eq(owner, identity.id))
        try:
            return self.store.select_where(action.table, action.columns, filters)
        except StoreError as e:
            raise self._store_failure(action, e) from e

    def _update(
        self,
        identity: Identity,
        action: ActionDescriptor,
        owner: str | None,
        known: frozenset[str],
    ) -> dict[str, Any]:
        values: dict[str, Any] = dict(action.payload)
        if ID_COLUMN in values:
            raise InvalidRequest(f"{ID_COLUMN} cannot be updated")
        if owner is not None:
            values[owner] = identity.id
        self._check_columns(values, known, action.table)
        if owner is not None:
            self._assert_owner(identity, action, owner)
        try:
            row = self.store.update_where(action.table, action.target_id, values)
        except StoreError as e:
            raise self._store_failure(action, e) from e
        if row is None:
            raise InvalidRequest("Record not found")
        return row

    def _delete(
        self, identity: Identity, action: ActionDescriptor, owner: str | None
    ) -> dict[str, Any]:
        if owner is not None:
            self._assert_owner(identity, action, owner)
        try:
            row = self.store.delete_where(action.table, action.target_id)
        except StoreError as e:
            raise self._store_failure(action, e) from e
        if row is None:
            raise InvalidRequest("Record not found")
        return row

