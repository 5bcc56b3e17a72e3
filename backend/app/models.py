"""
Resource tables exposed through the data gateway: ideas and blueprints.

Tables are reached generically by name (see app.core.store); which of them are
user-scoped is configured in Settings.GATEWAY_RESOURCE_TABLES, not here.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

# JSONB on PostgreSQL, plain JSON elsewhere (tests run on SQLite).
_JSON = JSON().with_variant(JSONB(), "postgresql")


def _utc_now() -> datetime:
    """Timezone-aware UTC now (replaces deprecated datetime.utcnow())."""
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Idea - a SaaS idea submitted by a user (owned by user_id)
# ---------------------------------------------------------------------------


class Idea(SQLModel, table=True):
    __tablename__ = "ideas"

    # Column-level defaults so generic Core inserts get them too.
    id: str = Field(
        default_factory=_new_id,
        primary_key=True,
        max_length=36,
        sa_column_kwargs={"default": _new_id},
    )
    user_id: str = Field(max_length=64, index=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None, sa_column=Column(Text))
    validation_score: float | None = Field(default=None)
    created_at: datetime = Field(
        default_factory=_utc_now, sa_column_kwargs={"default": _utc_now}
    )
    updated_at: datetime = Field(
        default_factory=_utc_now,
        sa_column_kwargs={"default": _utc_now, "onupdate": _utc_now},
    )


# ---------------------------------------------------------------------------
# Blueprint - generated validation/blueprint document for one idea
# ---------------------------------------------------------------------------


class Blueprint(SQLModel, table=True):
    __tablename__ = "blueprints"

    id: str = Field(
        default_factory=_new_id,
        primary_key=True,
        max_length=36,
        sa_column_kwargs={"default": _new_id},
    )
    idea_id: str = Field(
        foreign_key="ideas.id", index=True, max_length=36, ondelete="CASCADE"
    )
    validation: dict[str, Any] | None = Field(default=None, sa_column=Column(_JSON))
    features: dict[str, Any] | None = Field(default=None, sa_column=Column(_JSON))
    tech_stack: dict[str, Any] | None = Field(default=None, sa_column=Column(_JSON))
    pricing_model: dict[str, Any] | None = Field(
        default=None, sa_column=Column(_JSON)
    )
    user_flow: str | None = Field(default=None, sa_column=Column(Text))
    tasks: list[dict[str, Any]] | None = Field(default=None, sa_column=Column(_JSON))
    created_at: datetime = Field(
        default_factory=_utc_now, sa_column_kwargs={"default": _utc_now}
    )
    updated_at: datetime = Field(
        default_factory=_utc_now,
        sa_column_kwargs={"default": _utc_now, "onupdate": _utc_now},
    )
