"""Message model for room chat."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable

DELETED_MESSAGE_TEXT = "[Message deleted]"


class Message(SoftDeletable, table=True):
    """A chat message posted in a room.

    Deleted messages keep their row so thread structure survives, but the
    body is replaced with a fixed placeholder.

    Attributes:
        id: Unique identifier (UUID).
        room_id: The room the message was posted in.
        author_id: Who wrote it.
        text: Message body.
        is_edited: Whether the body was changed after posting.
        edited_at: Time of the last edit.
        created_at: When the message was posted.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    room_id: UUID = Field(foreign_key="room.id", index=True)
    author_id: UUID = Field(foreign_key="user.id", index=True)
    text: str
    is_edited: bool = Field(default=False)
    edited_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow, index=True)

    def on_soft_delete(self) -> None:
        self.text = DELETED_MESSAGE_TEXT
