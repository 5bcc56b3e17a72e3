"""SqlTableStore against an in-memory SQLite database."""

from collections.abc import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from app import models  # noqa: F401
from app.core.gateway.filters import Filter, FilterOperator, build_filter, eq
from app.core.store import SqlTableStore, StoreError


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def store(engine: Engine) -> SqlTableStore:
    return SqlTableStore(engine, SQLModel.metadata)


def test_columns(store: SqlTableStore) -> None:
    cols = store.columns("ideas")
    assert {"id", "user_id", "title", "description", "created_at"} <= cols


def test_columns_unknown_table(store: SqlTableStore) -> None:
    with pytest.raises(StoreError, match="does not exist"):
        store.columns("nope")


def test_insert_generates_id_and_timestamps(store: SqlTableStore) -> None:
    row = store.insert("ideas", {"user_id": "U1", "title": "Idea"})
    assert row["id"]
    assert row["user_id"] == "U1"
    assert row["created_at"] is not None


def test_select_where_filters_and_columns(store: SqlTableStore) -> None:
    a = store.insert("ideas", {"user_id": "U1", "title": "a", "validation_score": 8})
    store.insert("ideas", {"user_id": "U1", "title": "b", "validation_score": 2})
    store.insert("ideas", {"user_id": "U2", "title": "c", "validation_score": 9})

    rows = store.select_where(
        "ideas",
        ["id", "title"],
        [eq("user_id", "U1"), build_filter("validation_score", "gt", 5)],
    )
    assert rows == [{"id": a["id"], "title": "a"}]


def test_select_where_in(store: SqlTableStore) -> None:
    store.insert("ideas", {"user_id": "U1", "title": "a"})
    store.insert("ideas", {"user_id": "U1", "title": "b"})
    store.insert("ideas", {"user_id": "U1", "title": "c"})
    rows = store.select_where("ideas", ["title"], [build_filter("title", "in", ["a", "c"])])
    assert sorted(r["title"] for r in rows) == ["a", "c"]


def test_select_where_unknown_column(store: SqlTableStore) -> None:
    with pytest.raises(StoreError):
        store.select_where("ideas", ["nope"], [])


def test_update_where(store: SqlTableStore) -> None:
    row = store.insert("ideas", {"user_id": "U1", "title": "old"})
    out = store.update_where("ideas", row["id"], {"title": "new"})
    assert out is not None
    assert out["title"] == "new"
    assert store.update_where("ideas", "missing", {"title": "x"}) is None


def test_delete_where(store: SqlTableStore) -> None:
    row = store.insert("ideas", {"user_id": "U1", "title": "bye"})
    out = store.delete_where("ideas", row["id"])
    assert out is not None
    assert out["id"] == row["id"]
    assert store.select_where("ideas", None, [eq("id", row["id"])]) == []
    assert store.delete_where("ideas", row["id"]) is None


def test_json_columns_round_trip(store: SqlTableStore) -> None:
    idea = store.insert("ideas", {"user_id": "U1", "title": "x"})
    bp = store.insert(
        "blueprints",
        {"idea_id": idea["id"], "features": {"core": ["auth"]}, "tasks": [{"title": "t"}]},
    )
    rows = store.select_where("blueprints", None, [eq("id", bp["id"])])
    assert rows[0]["features"] == {"core": ["auth"]}
    assert rows[0]["tasks"] == [{"title": "t"}]


def test_insert_constraint_violation_is_store_error(store: SqlTableStore) -> None:
    with pytest.raises(StoreError):
        store.insert("ideas", {"title": "no owner"})


def test_predicate_build_failure_is_store_error(store: SqlTableStore) -> None:
    # Bypasses build_filter validation; the store must still classify the error.
    bad = Filter(column="validation_score", operator=FilterOperator.GT, value=None)
    with pytest.raises(StoreError):
        store.select_where("ideas", None, [bad])
