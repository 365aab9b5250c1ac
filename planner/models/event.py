"""Event model, the top-level collaboration space.

An event has exactly one primary coordinator and any number of
co-coordinators. Both are derived owners: they hold implicit full access to
every room of the event without a participant row. Every event owns one
``main`` room created together with it.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable


class EventType(str, Enum):
    WEDDING = "wedding"
    CORPORATE = "corporate"
    PARTY = "party"
    DESTINATION = "destination"
    OTHER = "other"


class EventStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class Event(SoftDeletable, table=True):
    """An event being planned by a group of users.

    Attributes:
        id: Unique identifier (UUID).
        name: Event title.
        description: Free-form description.
        type: Kind of event.
        date: When the event takes place, if known.
        status: Planning status; soft-deleted events end as "cancelled".
        budget_total: Planned budget.
        expected_guests: Planned head count.
        coordinator_id: The primary coordinator. Cannot be removed.
        co_coordinator_ids: Additional coordinators, stored as a JSON list of
            UUID strings. Always reassign the list; in-place mutation is not
            tracked by the JSON column.
        created_by: Who created the event.
        created_at: Creation time; listings sort on it, newest first.
        updated_at: Last modification time.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    description: str | None = None
    type: EventType = Field(default=EventType.OTHER)
    date: datetime | None = None
    status: EventStatus = Field(default=EventStatus.PLANNING, index=True)
    budget_total: float = Field(default=0)
    expected_guests: int = Field(default=0)
    coordinator_id: UUID = Field(foreign_key="user.id", index=True)
    co_coordinator_ids: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    created_by: UUID = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    def has_co_coordinator(self, user_id: UUID) -> bool:
        return str(user_id) in (self.co_coordinator_ids or [])

    def coordinator_ids(self) -> list[UUID]:
        """Primary coordinator first, then co-coordinators in insertion order."""
        return [self.coordinator_id, *(UUID(u) for u in self.co_coordinator_ids or [])]

    def on_soft_delete(self) -> None:
        self.status = EventStatus.CANCELLED
        self.updated_at = utcnow()
