"""Lifecycle states shared by every soft-deletable entity.

ACTIVE -> SOFT_DELETED is one-way. Either state may go to HARD_DELETED,
which removes the row and is reserved for operator tooling.
"""

from datetime import datetime
from enum import Enum

from planner.core.errors import Conflict
from planner.models import SoftDeletable


class LifecycleState(str, Enum):
    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"
    HARD_DELETED = "hard_deleted"


def state_of(row: SoftDeletable | None) -> LifecycleState:
    """State of a loaded row; None stands for a row that no longer exists."""
    if row is None:
        return LifecycleState.HARD_DELETED
    return LifecycleState.SOFT_DELETED if row.is_deleted else LifecycleState.ACTIVE


def mark_soft_deleted(row: SoftDeletable, ts: datetime) -> None:
    """Apply the ACTIVE -> SOFT_DELETED transition to one row."""
    if row.is_deleted:
        raise Conflict(f"{type(row).__name__} is already deleted")
    row.is_deleted = True
    row.deleted_at = ts
    row.on_soft_delete()
