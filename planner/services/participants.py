"""Room participant service.

Every mutation requires a manage grant on the room. Removing a participant,
leaving, and turning off ``can_manage`` go through the last-manager guard
under a room lock inside the same transaction as the change.
"""
import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.access.grants import FULL_PERMISSIONS, PermissionFlags
from planner.access.guard import ensure_not_last_manager, ensure_room_not_main, lock_room
from planner.access.membership import is_event_coordinator, resolve_event_role
from planner.access.rooms import (
    find_participant,
    require_can_manage_room,
    require_room,
    require_room_access,
)
from planner.core.database import transaction, utcnow
from planner.core.errors import Conflict, NotFound
from planner.lifecycle.states import mark_soft_deleted
from planner.models import Event, NotificationLevel, Role, RoomParticipant, User

logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS = PermissionFlags(can_post=True, can_edit=True)

# Defaults for bulk adds, by event role. Coordinators are skipped.
ROLE_PERMISSIONS = {
    Role.COLLABORATOR: PermissionFlags(can_post=True, can_edit=True),
    Role.GUEST: PermissionFlags(),
    Role.VENDOR: PermissionFlags(can_post=True, can_edit=True),
}


def add_participant(
    session: Session,
    room_id: UUID,
    actor_id: UUID,
    user_id: UUID,
    permissions: PermissionFlags | None = None,
) -> RoomParticipant:
    room = require_room(session, room_id)
    require_can_manage_room(session, room, actor_id)

    if find_participant(session, room_id, user_id):
        raise Conflict("User is already a participant")
    if not session.get(User, user_id):
        raise NotFound("User not found")

    flags = permissions or DEFAULT_PERMISSIONS
    with transaction(session):
        participant = RoomParticipant(
            room_id=room_id, user_id=user_id, added_by=actor_id, **flags.to_dict()
        )
        session.add(participant)

    session.refresh(participant)
    logger.info(f"Added {user_id} to room {room_id}")
    return participant


def remove_participant(session: Session, room_id: UUID, actor_id: UUID, user_id: UUID) -> None:
    room = require_room(session, room_id)
    require_can_manage_room(session, room, actor_id)

    participant = find_participant(session, room_id, user_id)
    if not participant:
        raise NotFound("User is not a participant")

    with transaction(session):
        lock_room(session, room_id)
        ensure_not_last_manager(session, room_id, participant)
        mark_soft_deleted(participant, utcnow())
        session.add(participant)

    logger.info(f"Removed {user_id} from room {room_id}")


def update_permissions(
    session: Session,
    room_id: UUID,
    actor_id: UUID,
    user_id: UUID,
    can_post: bool | None = None,
    can_edit: bool | None = None,
    can_delete: bool | None = None,
    can_manage: bool | None = None,
) -> RoomParticipant:
    """Change a participant's flags. Flags left as None are unchanged."""
    room = require_room(session, room_id)
    require_can_manage_room(session, room, actor_id)

    participant = find_participant(session, room_id, user_id)
    if not participant:
        raise NotFound("User is not a participant")

    with transaction(session):
        if can_manage is False and participant.can_manage:
            lock_room(session, room_id)
            ensure_not_last_manager(session, room_id, participant)
        if can_post is not None:
            participant.can_post = can_post
        if can_edit is not None:
            participant.can_edit = can_edit
        if can_delete is not None:
            participant.can_delete = can_delete
        if can_manage is not None:
            participant.can_manage = can_manage
        session.add(participant)

    session.refresh(participant)
    return participant


def update_notification_level(
    session: Session, room_id: UUID, user_id: UUID, level: NotificationLevel
) -> RoomParticipant:
    """Set the caller's own notification level in a room."""
    require_room(session, room_id)
    participant = find_participant(session, room_id, user_id)
    if not participant:
        raise NotFound("Not a participant of this room")

    with transaction(session):
        participant.notification_level = level
        session.add(participant)

    session.refresh(participant)
    return participant


def leave_room(session: Session, room_id: UUID, user_id: UUID) -> None:
    room = require_room(session, room_id)
    ensure_room_not_main(room, "leave")

    participant = find_participant(session, room_id, user_id)
    if not participant:
        raise NotFound("Not a participant of this room")

    with transaction(session):
        lock_room(session, room_id)
        ensure_not_last_manager(session, room_id, participant)
        mark_soft_deleted(participant, utcnow())
        session.add(participant)

    logger.info(f"{user_id} left room {room_id}")


def list_room_participants(session: Session, room_id: UUID, user_id: UUID) -> list[dict]:
    """
    List everyone who can see a room.

    Explicit participants come from their rows. Coordinators without a row
    are listed with full permissions and ``is_coordinator`` set. Entries are
    sorted by join time, most recent first.
    """
    room = require_room_access(session, room_id, user_id)
    event = session.get(Event, room.event_id)

    participants = session.exec(
        select(RoomParticipant)
        .where(RoomParticipant.room_id == room_id)
        .where(RoomParticipant.is_deleted == False)  # noqa: E712
    ).all()

    entries = []
    for p in participants:
        user = session.get(User, p.user_id)
        entries.append(
            {
                "user_id": p.user_id,
                "name": user.name if user else None,
                "email": user.email if user else None,
                "can_post": p.can_post,
                "can_edit": p.can_edit,
                "can_delete": p.can_delete,
                "can_manage": p.can_manage,
                "notification_level": p.notification_level,
                "joined_at": p.joined_at,
                "is_coordinator": False,
            }
        )

    listed = {p.user_id for p in participants}
    for coordinator_id in event.coordinator_ids():
        if coordinator_id in listed:
            continue
        user = session.get(User, coordinator_id)
        entries.append(
            {
                "user_id": coordinator_id,
                "name": user.name if user else None,
                "email": user.email if user else None,
                **FULL_PERMISSIONS.to_dict(),
                "notification_level": NotificationLevel.ALL,
                "joined_at": event.created_at,
                "is_coordinator": True,
            }
        )

    return sorted(entries, key=lambda e: e["joined_at"], reverse=True)


def add_multiple_members_to_room(
    session: Session, room_id: UUID, actor_id: UUID, user_ids: list[UUID]
) -> dict:
    """
    Add several users at once with defaults taken from their event role.

    Collaborators and vendors can post and edit, guests are read-only,
    coordinators are skipped because they already have implicit access.
    Users already present or unknown are skipped too. Returns per-user
    outcomes with totals.
    """
    room = require_room(session, room_id)
    require_can_manage_room(session, room, actor_id)
    event = session.get(Event, room.event_id)

    existing = set(
        session.exec(
            select(RoomParticipant.user_id)
            .where(RoomParticipant.room_id == room_id)
            .where(RoomParticipant.is_deleted == False)  # noqa: E712
        ).all()
    )

    results = []
    with transaction(session):
        for user_id in user_ids:
            if user_id in existing:
                results.append({"user_id": user_id, "status": "already_exists"})
                continue
            if is_event_coordinator(event, user_id):
                results.append({"user_id": user_id, "status": "is_coordinator"})
                continue
            if not session.get(User, user_id):
                results.append({"user_id": user_id, "status": "user_not_found"})
                continue

            role = resolve_event_role(session, event, user_id)
            flags = ROLE_PERMISSIONS.get(role, DEFAULT_PERMISSIONS)
            participant = RoomParticipant(
                room_id=room_id, user_id=user_id, added_by=actor_id, **flags.to_dict()
            )
            session.add(participant)
            session.flush()
            existing.add(user_id)
            results.append(
                {"user_id": user_id, "status": "added", "participant_id": participant.id}
            )

    added = sum(1 for r in results if r["status"] == "added")
    logger.info(f"Bulk add to room {room_id}: {added} of {len(user_ids)} added")
    return {
        "total": len(user_ids),
        "added": added,
        "skipped": len(user_ids) - added,
        "results": results,
    }
