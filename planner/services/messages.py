"""Message service: posting, editing, deleting, listing and read markers."""
import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from planner.access.rooms import (
    find_participant,
    require_can_delete_in_room,
    require_can_edit_in_room,
    require_can_post_in_room,
    require_room,
    require_room_access,
)
from planner.core.config import settings
from planner.core.database import as_utc, transaction, utcnow
from planner.core.errors import Forbidden, NotFound, ValidationFailed
from planner.lifecycle.states import mark_soft_deleted
from planner.models import Message, Room, RoomParticipant

logger = logging.getLogger(__name__)

UNREAD_CAP = 100


def _validate_text(text: str) -> str:
    if not text or not text.strip():
        raise ValidationFailed("Message text cannot be empty")
    if len(text) > settings.message_max_length:
        raise ValidationFailed(
            f"Message text cannot exceed {settings.message_max_length} characters"
        )
    return text


def _require_message(session: Session, message_id: UUID) -> Message:
    message = session.get(Message, message_id)
    if not message or message.is_deleted:
        raise NotFound("Message not found")
    return message


def send_message(session: Session, room_id: UUID, author_id: UUID, text: str) -> Message:
    room = require_room(session, room_id)
    require_can_post_in_room(session, room, author_id)
    text = _validate_text(text)

    with transaction(session):
        message = Message(room_id=room_id, author_id=author_id, text=text)
        session.add(message)
        room.last_message_at = message.created_at
        session.add(room)

    session.refresh(message)
    return message


def edit_message(session: Session, message_id: UUID, user_id: UUID, text: str) -> Message:
    """Edit one's own message. Needs the edit permission in the room."""
    message = _require_message(session, message_id)
    if message.author_id != user_id:
        raise Forbidden("You can only edit your own messages")
    room = require_room(session, message.room_id)
    require_can_edit_in_room(session, room, user_id)
    text = _validate_text(text)

    with transaction(session):
        message.text = text
        message.is_edited = True
        message.edited_at = utcnow()
        session.add(message)

    session.refresh(message)
    return message


def delete_message(session: Session, message_id: UUID, user_id: UUID) -> Message:
    """Soft-delete one's own message; the body is replaced with a placeholder."""
    message = _require_message(session, message_id)
    if message.author_id != user_id:
        raise Forbidden("You can only delete your own messages")
    room = require_room(session, message.room_id)
    require_can_delete_in_room(session, room, user_id)

    with transaction(session):
        mark_soft_deleted(message, utcnow())
        session.add(message)

    session.refresh(message)
    return message


def list_messages(
    session: Session,
    room_id: UUID,
    user_id: UUID,
    limit: int | None = None,
    before: datetime | None = None,
) -> list[Message]:
    """Live messages of a room, newest first, one page at a time.

    ``before`` is the ``created_at`` of the oldest message already shown.
    """
    require_room_access(session, room_id, user_id)
    page_size = min(limit or settings.message_page_size, settings.message_page_size)

    statement = (
        select(Message)
        .where(Message.room_id == room_id)
        .where(Message.is_deleted == False)  # noqa: E712
    )
    if before:
        statement = statement.where(Message.created_at < as_utc(before))
    statement = statement.order_by(Message.created_at.desc()).limit(page_size)
    return list(session.exec(statement).all())


def mark_room_as_read(session: Session, room_id: UUID, user_id: UUID) -> bool:
    """Move the caller's read marker to now.

    Returns False for coordinators without a participant row, who have no
    marker to move.
    """
    require_room_access(session, room_id, user_id)
    participant = find_participant(session, room_id, user_id)
    if not participant:
        return False

    with transaction(session):
        participant.last_read_at = utcnow()
        session.add(participant)
    return True


def get_unread_counts(session: Session, user_id: UUID, event_id: UUID | None = None) -> list[dict]:
    """Unread counts per joined room, capped at ``UNREAD_CAP`` with a ``has_more`` flag."""
    statement = (
        select(RoomParticipant, Room)
        .join(Room, Room.id == RoomParticipant.room_id)
        .where(RoomParticipant.user_id == user_id)
        .where(RoomParticipant.is_deleted == False)  # noqa: E712
        .where(Room.is_deleted == False)  # noqa: E712
    )
    if event_id:
        statement = statement.where(Room.event_id == event_id)

    counts = []
    for participant, room in session.exec(statement).all():
        unread = (
            select(Message.id)
            .where(Message.room_id == room.id)
            .where(Message.author_id != user_id)
            .where(Message.is_deleted == False)  # noqa: E712
        )
        if participant.last_read_at:
            unread = unread.where(Message.created_at > participant.last_read_at)
        found = len(session.exec(unread.limit(UNREAD_CAP + 1)).all())
        counts.append(
            {
                "room_id": room.id,
                "unread_count": min(found, UNREAD_CAP),
                "has_more": found > UNREAD_CAP,
            }
        )
    return counts
