"""Event membership and invitation models.

EventMember is the explicit (event, user, role) record for people who are
not coordinators. Coordinators are derived from the Event row and never
need a membership row. EventInvitation is how users join: accepting one
creates the membership and main-room access.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.database import utcnow
from planner.models.base import Role, SoftDeletable, live_unique_index


class EventMember(SoftDeletable, table=True):
    """A user's explicit role within one event.

    Attributes:
        id: Unique identifier (UUID).
        event_id: The event.
        user_id: The member.
        role: Role within the event.
        joined_at: When the membership was created.
        added_by: Who created the membership.
    """
    __tablename__ = "event_member"
    __table_args__ = (live_unique_index("uq_event_member_live", "event_id", "user_id"),)

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    role: Role
    joined_at: datetime = Field(default_factory=utcnow)
    added_by: UUID = Field(foreign_key="user.id")


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class EventInvitation(SoftDeletable, table=True):
    """An invitation to join an event under a given role.

    The token is handed to the invitee out of band. Only pending invitations
    can be accepted, declined or cancelled.
    """
    __tablename__ = "event_invitation"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    event_id: UUID = Field(foreign_key="event.id", index=True)
    invited_email: str = Field(index=True)
    invited_by: UUID = Field(foreign_key="user.id", index=True)
    role: Role
    status: InvitationStatus = Field(default=InvitationStatus.PENDING, index=True)
    token: str = Field(index=True, unique=True)
    expires_at: datetime
    message: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    accepted_at: datetime | None = None
    declined_at: datetime | None = None
    cancelled_at: datetime | None = None
