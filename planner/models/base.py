"""Shared columns for rows that follow the soft-delete lifecycle."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel


class Role(str, Enum):
    """Roles a user can hold, globally (coarse) or within one event."""
    COORDINATOR = "coordinator"
    COLLABORATOR = "collaborator"
    GUEST = "guest"
    VENDOR = "vendor"


class SoftDeletable(SQLModel):
    """Mixin for tables whose rows are logically deleted.

    Attributes:
        is_deleted: True once the row has been soft-deleted. Ordinary read
            paths filter on this flag.
        deleted_at: When the row was soft-deleted; None while active.
    """
    is_deleted: bool = Field(default=False, index=True)
    deleted_at: datetime | None = None

    def on_soft_delete(self) -> None:
        """Per-entity redaction applied by the lifecycle transition."""


def live_unique_index(name: str, *columns: str) -> Index:
    """Unique index over live rows only.

    Junction rows are soft-deleted rather than removed, so uniqueness of
    (parent, user) must ignore tombstones or a removed member could never be
    added back.
    """
    return Index(
        name,
        *columns,
        unique=True,
        sqlite_where=text("is_deleted = 0"),
        postgresql_where=text("is_deleted = false"),
    )
