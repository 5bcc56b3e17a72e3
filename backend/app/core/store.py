"""
Table store: the managed data store reached through four generic primitives.

The gateway only composes calls to it (see app.core.gateway.composer);
SqlTableStore implements the primitives with SQLAlchemy Core over the SQLModel
metadata. Every store-side failure surfaces as StoreError with the driver's
message; callers do not interpret it further.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy import Engine, MetaData, Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from app.core.gateway.filters import Filter, to_predicate

ID_COLUMN = "id"


class StoreError(Exception):
    """The table store rejected or failed a call."""


class TableStore(Protocol):
    def columns(self, table: str) -> frozenset[str]: ...

    def insert(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]: ...

    def select_where(
        self,
        table: str,
        columns: Sequence[str] | None,
        filters: Sequence[Filter],
    ) -> list[dict[str, Any]]: ...

    def update_where(
        self, table: str, id: Any, values: Mapping[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete_where(self, table: str, id: Any) -> dict[str, Any] | None: ...


def _error_message(e: SQLAlchemyError) -> str:
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else str(e)


class SqlTableStore:
    """
    TableStore on a SQLAlchemy engine.

    - Tables are looked up by name in ``metadata`` (no reflection per request).
    - Each call uses its own connection; mutations run in their own
      transaction and return the affected row via RETURNING.
    - update_where / delete_where return None when no row has the given id.
    """

    def __init__(self, engine: Engine, metadata: MetaData) -> None:
        self.engine = engine
        self.metadata = metadata

    def _table(self, name: str) -> Table:
        t = self.metadata.tables.get(name)
        if t is None:
            raise StoreError(f'relation "{name}" does not exist')
        return t

    def _id_column(self, t: Table) -> Any:
        if ID_COLUMN not in t.c:
            raise StoreError(f'table "{t.name}" has no "{ID_COLUMN}" column')
        return t.c[ID_COLUMN]

    def columns(self, table: str) -> frozenset[str]:
        return frozenset(c.name for c in self._table(table).columns)

    def insert(self, table: str, record: Mapping[str, Any]) -> dict[str, Any]:
        t = self._table(table)
        stmt = insert(t).values(dict(record)).returning(*t.c)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(stmt).mappings().one()
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
        return dict(row)

    def select_where(
        self,
        table: str,
        columns: Sequence[str] | None,
        filters: Sequence[Filter],
    ) -> list[dict[str, Any]]:
        t = self._table(table)
        try:
            cols = [t.c[c] for c in columns] if columns else list(t.c)
            predicates = [to_predicate(t.c[f.column], f) for f in filters]
        except KeyError as e:
            raise StoreError(f'column {e.args[0]!r} does not exist on "{table}"') from e
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
        stmt = select(*cols).where(*predicates)
        # Stable order so identical selects return identical results.
        stmt = stmt.order_by(*t.primary_key.columns)
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
        return [dict(r) for r in rows]

    def update_where(
        self, table: str, id: Any, values: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        t = self._table(table)
        stmt = (
            update(t)
            .where(self._id_column(t) == id)
            .values(dict(values))
            .returning(*t.c)
        )
        try:
            with self.engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
        return dict(row) if row is not None else None

    def delete_where(self, table: str, id: Any) -> dict[str, Any] | None:
        t = self._table(table)
        stmt = delete(t).where(self._id_column(t) == id).returning(*t.c)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
        return dict(row) if row is not None else None
