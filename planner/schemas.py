"""Request bodies and response shapes for the JSON API."""

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

from planner.models import (
    EventStatus,
    EventType,
    InvitationStatus,
    NotificationLevel,
    Role,
    RoomType,
)


class EventCreate(SQLModel):
    name: str
    description: str | None = None
    type: EventType = EventType.OTHER
    date: datetime | None = None
    budget_total: float = 0
    expected_guests: int = 0


class EventUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    type: EventType | None = None
    date: datetime | None = None
    budget_total: float | None = None
    expected_guests: int | None = None


class EventStatusUpdate(SQLModel):
    status: EventStatus


class EventRead(SQLModel):
    id: UUID
    name: str
    description: str | None
    type: EventType
    date: datetime | None
    status: EventStatus
    budget_total: float
    expected_guests: int
    coordinator_id: UUID
    co_coordinator_ids: list[str]
    created_at: datetime
    updated_at: datetime


class UserRef(SQLModel):
    user_id: UUID


class MemberAdd(SQLModel):
    user_id: UUID
    role: Role = Role.COLLABORATOR


class MemberRead(SQLModel):
    id: UUID
    event_id: UUID
    user_id: UUID
    role: Role
    joined_at: datetime


class RoomCreate(SQLModel):
    name: str
    type: RoomType = RoomType.TOPIC
    description: str | None = None
    vendor_id: UUID | None = None
    allow_guest_messages: bool = False


class RoomUpdate(SQLModel):
    name: str | None = None
    description: str | None = None
    allow_guest_messages: bool | None = None


class RoomRead(SQLModel):
    id: UUID
    event_id: UUID
    name: str
    description: str | None
    type: RoomType
    vendor_id: UUID | None
    is_archived: bool
    allow_guest_messages: bool
    created_at: datetime
    last_message_at: datetime | None


class PermissionsUpdate(SQLModel):
    can_post: bool | None = None
    can_edit: bool | None = None
    can_delete: bool | None = None
    can_manage: bool | None = None


class ParticipantAdd(PermissionsUpdate):
    user_id: UUID


class BulkAdd(SQLModel):
    user_ids: list[UUID]


class NotificationLevelUpdate(SQLModel):
    notification_level: NotificationLevel


class ParticipantRead(SQLModel):
    id: UUID
    room_id: UUID
    user_id: UUID
    can_post: bool
    can_edit: bool
    can_delete: bool
    can_manage: bool
    notification_level: NotificationLevel
    last_read_at: datetime | None
    joined_at: datetime


class MessageCreate(SQLModel):
    text: str


class MessageRead(SQLModel):
    id: UUID
    room_id: UUID
    author_id: UUID
    text: str
    is_edited: bool
    edited_at: datetime | None
    is_deleted: bool
    created_at: datetime


class InvitationCreate(SQLModel):
    invited_email: str
    role: Role = Role.COLLABORATOR
    message: str | None = None


class InvitationRead(SQLModel):
    id: UUID
    event_id: UUID
    invited_email: str
    invited_by: UUID
    role: Role
    status: InvitationStatus
    token: str
    expires_at: datetime
    message: str | None
    created_at: datetime
