"""Dashboard model for per-user event dashboard layouts."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable


class Dashboard(SoftDeletable, table=True):
    """A saved dashboard configuration for one user within one event."""
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str | None = None
    config: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
