"""Room service: creation, listing, updates, archive and deletion."""
import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.access.grants import FULL_PERMISSIONS
from planner.access.guard import ensure_room_not_main
from planner.access.membership import (
    is_event_coordinator,
    require_event_access,
    require_event_coordinator,
)
from planner.access.rooms import require_can_manage_room, require_room, require_room_access
from planner.core.database import transaction, utcnow
from planner.core.errors import NotFound, ValidationFailed
from planner.lifecycle.cascade import soft_delete_cascade
from planner.models import Room, RoomParticipant, RoomType, User

logger = logging.getLogger(__name__)


def create_room(
    session: Session,
    event_id: UUID,
    user_id: UUID,
    name: str,
    room_type: RoomType = RoomType.TOPIC,
    description: str | None = None,
    vendor_id: UUID | None = None,
    allow_guest_messages: bool = False,
) -> Room:
    """
    Create a room in an event. Coordinators only.

    The creator is added as a full-permission participant. The main room is
    created with the event and cannot be created a second time.
    """
    require_event_coordinator(session, event_id, user_id)
    if not name or not name.strip():
        raise ValidationFailed("Room name is required")
    if room_type == RoomType.MAIN:
        raise ValidationFailed("An event already has a main room")
    if room_type == RoomType.VENDOR:
        if not vendor_id:
            raise ValidationFailed("Vendor rooms require a vendor_id")
        if not session.get(User, vendor_id):
            raise NotFound("Vendor not found")

    with transaction(session):
        room = Room(
            event_id=event_id,
            name=name.strip(),
            description=description,
            type=room_type,
            vendor_id=vendor_id,
            allow_guest_messages=allow_guest_messages,
            created_by=user_id,
        )
        session.add(room)
        session.flush()
        session.add(
            RoomParticipant(
                room_id=room.id,
                user_id=user_id,
                added_by=user_id,
                **FULL_PERMISSIONS.to_dict(),
            )
        )

    session.refresh(room)
    logger.info(f"Created {room.type.value} room {room.id} in event {event_id}")
    return room


def get_room(session: Session, room_id: UUID, user_id: UUID) -> Room:
    return require_room_access(session, room_id, user_id)


def list_rooms_by_event(
    session: Session, event_id: UUID, include_archived: bool = False
) -> list[Room]:
    """Live rooms of an event, oldest first. No access check."""
    statement = (
        select(Room)
        .where(Room.event_id == event_id)
        .where(Room.is_deleted == False)  # noqa: E712
    )
    if not include_archived:
        statement = statement.where(Room.is_archived == False)  # noqa: E712
    return list(session.exec(statement.order_by(Room.created_at)).all())


def list_accessible_rooms(
    session: Session, event_id: UUID, user_id: UUID, include_archived: bool = False
) -> list[Room]:
    """Rooms of an event the user can open: all of them for coordinators."""
    event = require_event_access(session, event_id, user_id)
    rooms = list_rooms_by_event(session, event_id, include_archived)
    if is_event_coordinator(event, user_id):
        return rooms

    joined = set(
        session.exec(
            select(RoomParticipant.room_id)
            .where(RoomParticipant.user_id == user_id)
            .where(RoomParticipant.is_deleted == False)  # noqa: E712
        ).all()
    )
    return [room for room in rooms if room.id in joined]


def update_room(
    session: Session,
    room_id: UUID,
    user_id: UUID,
    name: str | None = None,
    description: str | None = None,
    allow_guest_messages: bool | None = None,
) -> Room:
    room = require_room(session, room_id)
    require_can_manage_room(session, room, user_id)

    with transaction(session):
        if name is not None:
            if not name.strip():
                raise ValidationFailed("Room name is required")
            room.name = name.strip()
        if description is not None:
            room.description = description
        if allow_guest_messages is not None:
            room.allow_guest_messages = allow_guest_messages
        room.updated_at = utcnow()
        session.add(room)

    session.refresh(room)
    return room


def archive_room(session: Session, room_id: UUID, user_id: UUID) -> Room:
    room = require_room(session, room_id)
    require_event_coordinator(session, room.event_id, user_id)
    ensure_room_not_main(room, "archive")

    with transaction(session):
        room.is_archived = True
        room.updated_at = utcnow()
        session.add(room)

    session.refresh(room)
    logger.info(f"Archived room {room_id}")
    return room


def delete_room(session: Session, room_id: UUID, user_id: UUID) -> dict[str, int]:
    """Soft-delete a room with its participants and messages. Coordinators only."""
    room = require_room(session, room_id, include_deleted=True)
    require_event_coordinator(session, room.event_id, user_id)
    ensure_room_not_main(room, "delete")

    with transaction(session):
        counts = soft_delete_cascade(session, room, utcnow())
    return dict(counts)
