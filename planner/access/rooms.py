"""Room-level permission checks.

Check functions (``can_*``, ``resolve_room_grant``) return booleans or None.
Require functions raise ``Forbidden``/``NotFound`` and return what the caller
needs next: the room, or the grant that allowed the action.
"""

import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.access.grants import (
    ExplicitParticipantGrant,
    ImplicitCoordinatorGrant,
    PermissionFlags,
    RoomGrant,
)
from planner.access.membership import is_event_coordinator
from planner.core.errors import Forbidden, NotFound
from planner.models import Event, Room, RoomParticipant

logger = logging.getLogger(__name__)


def require_room(session: Session, room_id: UUID, include_deleted: bool = False) -> Room:
    room = session.get(Room, room_id)
    if not room or (room.is_deleted and not include_deleted):
        raise NotFound("Room not found")
    return room


def find_participant(session: Session, room_id: UUID, user_id: UUID) -> RoomParticipant | None:
    """The live participant row for (room, user), if any."""
    statement = (
        select(RoomParticipant)
        .where(RoomParticipant.room_id == room_id)
        .where(RoomParticipant.user_id == user_id)
        .where(RoomParticipant.is_deleted == False)  # noqa: E712
    )
    return session.exec(statement).first()


def is_room_event_coordinator(session: Session, room: Room, user_id: UUID) -> bool:
    event = session.get(Event, room.event_id)
    if not event or event.is_deleted:
        return False
    return is_event_coordinator(event, user_id)


def resolve_room_grant(session: Session, room: Room, user_id: UUID) -> RoomGrant | None:
    """Resolve where a user's rights in a room come from.

    Coordinators of the owning event win without a participant lookup.
    """
    if is_room_event_coordinator(session, room, user_id):
        return ImplicitCoordinatorGrant()
    participant = find_participant(session, room.id, user_id)
    if participant:
        return ExplicitParticipantGrant(participant)
    return None


def get_user_room_access(session: Session, room: Room, user_id: UUID) -> PermissionFlags | None:
    grant = resolve_room_grant(session, room, user_id)
    return grant.flags if grant else None


def can_post_in_room(session: Session, room: Room, user_id: UUID) -> bool:
    flags = get_user_room_access(session, room, user_id)
    return bool(flags and flags.can_post)


def can_edit_in_room(session: Session, room: Room, user_id: UUID) -> bool:
    flags = get_user_room_access(session, room, user_id)
    return bool(flags and flags.can_edit)


def can_delete_in_room(session: Session, room: Room, user_id: UUID) -> bool:
    flags = get_user_room_access(session, room, user_id)
    return bool(flags and flags.can_delete)


def can_manage_room(session: Session, room: Room, user_id: UUID) -> bool:
    flags = get_user_room_access(session, room, user_id)
    return bool(flags and flags.can_manage)


def _require_flag(session: Session, room: Room, user_id: UUID, flag: str, message: str) -> RoomGrant:
    grant = resolve_room_grant(session, room, user_id)
    if grant is None or not getattr(grant.flags, flag):
        logger.debug(f"User {user_id} lacks {flag} in room {room.id}")
        raise Forbidden(message)
    return grant


def require_can_post_in_room(session: Session, room: Room, user_id: UUID) -> RoomGrant:
    return _require_flag(
        session, room, user_id, "can_post", "You do not have permission to post in this room"
    )


def require_can_edit_in_room(session: Session, room: Room, user_id: UUID) -> RoomGrant:
    return _require_flag(
        session, room, user_id, "can_edit", "You do not have permission to edit in this room"
    )


def require_can_delete_in_room(session: Session, room: Room, user_id: UUID) -> RoomGrant:
    return _require_flag(
        session, room, user_id, "can_delete", "You do not have permission to delete in this room"
    )


def require_can_manage_room(session: Session, room: Room, user_id: UUID) -> RoomGrant:
    return _require_flag(
        session, room, user_id, "can_manage", "You do not have permission to manage this room"
    )


def require_room_access(session: Session, room_id: UUID, user_id: UUID) -> Room:
    """Load a room the user may read: coordinator of its event or a live participant."""
    room = require_room(session, room_id)
    if resolve_room_grant(session, room, user_id) is None:
        raise Forbidden("You do not have access to this room")
    return room
