"""Guards that keep rooms manageable and structural entities in place.

``ensure_not_last_manager`` counts the explicit managers of a room and then
lets the caller mutate. Both steps must happen inside the caller's
transaction after ``lock_room`` so concurrent changes to the same room's
manager set are serialized. Implicit coordinator rights are not counted.
"""

import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.core.database import utcnow
from planner.core.errors import Conflict, NotFound
from planner.models import Event, Room, RoomParticipant, RoomType

logger = logging.getLogger(__name__)


def lock_room(session: Session, room_id: UUID) -> Room:
    """Take a write lock on a room row for the rest of the transaction.

    ``FOR UPDATE`` covers servers that support row locks. SQLite ignores it,
    so the row is also written and flushed, which takes the database write
    lock there.
    """
    statement = select(Room).where(Room.id == room_id).with_for_update()
    room = session.exec(statement).first()
    if not room:
        raise NotFound("Room not found")
    room.updated_at = utcnow()
    session.add(room)
    session.flush()
    return room


def explicit_managers(session: Session, room_id: UUID) -> list[RoomParticipant]:
    statement = (
        select(RoomParticipant)
        .where(RoomParticipant.room_id == room_id)
        .where(RoomParticipant.is_deleted == False)  # noqa: E712
    )
    return [p for p in session.exec(statement).all() if p.can_manage]


def ensure_not_last_manager(session: Session, room_id: UUID, target: RoomParticipant) -> None:
    """Reject removing or demoting the only explicit manager of a room."""
    if not target.can_manage:
        return
    managers = explicit_managers(session, room_id)
    if len(managers) == 1 and managers[0].id == target.id:
        logger.warning(
            f"Rejected change to last manager {target.user_id} of room {room_id}"
        )
        raise Conflict("Cannot remove the last manager from the room")


def ensure_not_main_coordinator(event: Event, user_id: UUID) -> None:
    if event.coordinator_id == user_id:
        logger.warning(f"Rejected removal of main coordinator from event {event.id}")
        raise Conflict("Cannot remove the main coordinator from the event")


def ensure_room_not_main(room: Room, action: str) -> None:
    """Main rooms cannot be archived, deleted or left."""
    if room.type == RoomType.MAIN:
        logger.warning(f"Rejected attempt to {action} main room {room.id}")
        raise Conflict(f"Cannot {action} the main room")
