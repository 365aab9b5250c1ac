"""Task model for event planning to-dos."""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable


class TaskStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Task(SoftDeletable, table=True):
    """A planning task scoped to an event, optionally assigned to a member."""
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    title: str
    description: str | None = None
    assignee_id: UUID | None = Field(default=None, foreign_key="user.id", index=True)
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: datetime | None = None
    completed_at: datetime | None = None
    created_by: UUID = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
