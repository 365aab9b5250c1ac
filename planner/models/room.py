"""Room and room participant models.

A room is a collaboration channel scoped to one event. RoomParticipant is
the explicit (room, user, permission flags) record. Coordinators of the
owning event have implicit full permissions and need no participant row.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import SoftDeletable, live_unique_index


class RoomType(str, Enum):
    MAIN = "main"
    VENDOR = "vendor"
    TOPIC = "topic"
    GUEST_ANNOUNCEMENTS = "guest_announcements"
    PRIVATE = "private"


class NotificationLevel(str, Enum):
    ALL = "all"
    MENTIONS = "mentions"
    NONE = "none"


class Room(SoftDeletable, table=True):
    """A chat/collaboration channel inside an event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: The owning event.
        name: Display name.
        description: Optional description.
        type: Room kind. The single ``main`` room of an event cannot be
            archived, deleted or left.
        vendor_id: Required for vendor rooms, the vendor the room is for.
        is_archived: Archived rooms are hidden from default listings.
        allow_guest_messages: Whether guests may post.
        created_by: Who created the room.
        created_at: Creation time.
        updated_at: Last modification; also bumped when the manager set is
            locked for a permission change.
        last_message_at: Time of the latest message, if any.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    name: str
    description: str | None = None
    type: RoomType = Field(default=RoomType.TOPIC, index=True)
    vendor_id: UUID | None = Field(default=None, foreign_key="user.id")
    is_archived: bool = Field(default=False)
    allow_guest_messages: bool = Field(default=False)
    created_by: UUID = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_message_at: datetime | None = None


class RoomParticipant(SoftDeletable, table=True):
    """Explicit membership of a user in a room.

    Attributes:
        id: Unique identifier (UUID).
        room_id: The room.
        user_id: The participant.
        can_post: May send messages.
        can_edit: May edit own messages.
        can_delete: May delete own messages.
        can_manage: May add, remove and re-permission participants.
        notification_level: Which messages notify this participant.
        last_read_at: Read marker for unread counts.
        joined_at: When the row was created.
        added_by: Who added the participant.
    """
    __tablename__ = "room_participant"
    __table_args__ = (live_unique_index("uq_room_participant_live", "room_id", "user_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    room_id: UUID = Field(foreign_key="room.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    can_post: bool = Field(default=True)
    can_edit: bool = Field(default=True)
    can_delete: bool = Field(default=False)
    can_manage: bool = Field(default=False)
    notification_level: NotificationLevel = Field(default=NotificationLevel.ALL)
    last_read_at: datetime | None = None
    joined_at: datetime = Field(default_factory=utcnow)
    added_by: UUID = Field(foreign_key="user.id")
