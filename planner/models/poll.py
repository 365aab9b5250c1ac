"""Poll and vote models for group decisions."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable, live_unique_index


class Poll(SoftDeletable, table=True):
    """A question put to the members of an event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: The owning event.
        room_id: The room the poll was created in, if any. Polls belong to
            the event, so deleting that room alone leaves the poll in place.
        question: The question asked.
        options: JSON list of ``{"id", "text"}`` choices.
        allow_multiple_choices: Whether a vote may select several options.
        is_closed: Closed polls accept no new votes.
        created_by: Who created the poll.
        created_at: Creation time.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    room_id: UUID | None = Field(default=None, foreign_key="room.id", index=True)
    question: str
    options: list[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    allow_multiple_choices: bool = Field(default=False)
    is_closed: bool = Field(default=False)
    created_by: UUID = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)


class PollVote(SoftDeletable, table=True):
    """One user's answer to a poll."""
    __tablename__ = "poll_vote"
    __table_args__ = (live_unique_index("uq_poll_vote_live", "poll_id", "user_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    poll_id: UUID = Field(foreign_key="poll.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    option_ids: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)
