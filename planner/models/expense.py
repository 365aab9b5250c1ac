"""Expense model for budget tracking."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable


class Expense(SoftDeletable, table=True):
    """Money spent on an event."""
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    description: str
    amount: float
    category: str | None = None
    paid_by: UUID = Field(foreign_key="user.id")
    created_by: UUID = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)
