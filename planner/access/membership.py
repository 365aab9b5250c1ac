"""Event-level role resolution.

A user's standing in an event comes from, in order: the primary coordinator
field, the co-coordinator list, then a live EventMember row. Coordinator
status is derived from the event row and is checked before touching the
membership table.
"""

import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.core.config import settings
from planner.core.errors import Forbidden, NotFound
from planner.models import Event, EventMember, EventStatus, Role, Room, RoomParticipant

logger = logging.getLogger(__name__)


def is_event_coordinator(event: Event, user_id: UUID) -> bool:
    """True for the primary coordinator and every co-coordinator."""
    return event.coordinator_id == user_id or event.has_co_coordinator(user_id)


def find_event_member(session: Session, event_id: UUID, user_id: UUID) -> EventMember | None:
    statement = (
        select(EventMember)
        .where(EventMember.event_id == event_id)
        .where(EventMember.user_id == user_id)
        .where(EventMember.is_deleted == False)  # noqa: E712
    )
    return session.exec(statement).first()


def resolve_event_role(session: Session, event: Event, user_id: UUID) -> Role | None:
    """Effective role of a user in an event, or None when they have none.

    Coordinator status comes from the event row only. A membership row that
    still says ``coordinator`` without backing on the event grants nothing.
    """
    if is_event_coordinator(event, user_id):
        return Role.COORDINATOR
    member = find_event_member(session, event.id, user_id)
    if not member or member.role == Role.COORDINATOR:
        return None
    return member.role


def require_event(session: Session, event_id: UUID, include_deleted: bool = False) -> Event:
    """Load an event, treating soft-deleted events as missing unless asked."""
    event = session.get(Event, event_id)
    if not event or (event.is_deleted and not include_deleted):
        raise NotFound("Event not found")
    return event


def require_event_access(session: Session, event_id: UUID, user_id: UUID) -> Event:
    event = require_event(session, event_id)
    if resolve_event_role(session, event, user_id) is None:
        logger.debug(f"User {user_id} has no role in event {event_id}")
        raise Forbidden("You do not have access to this event")
    return event


def require_event_coordinator(session: Session, event_id: UUID, user_id: UUID) -> Event:
    event = require_event(session, event_id)
    if not is_event_coordinator(event, user_id):
        raise Forbidden("Only event coordinators can perform this action")
    return event


def require_main_coordinator(session: Session, event_id: UUID, user_id: UUID) -> Event:
    event = require_event(session, event_id)
    if event.coordinator_id != user_id:
        raise Forbidden("Only the main coordinator can perform this action")
    return event


def list_user_events(
    session: Session, user_id: UUID, status: EventStatus | None = None
) -> list[Event]:
    """
    List every live event a user can reach.

    Combines three sources:
    - Events the user is primary coordinator of (indexed lookup)
    - Events the user co-coordinates, found by scanning the most recently
      created live events; co-coordinators of older events fall outside the
      ``co_coordinator_scan_window`` and are only found through (c)
    - Events reachable through live participation in a live room

    Results are deduplicated by id and sorted newest first.
    """
    found: dict[UUID, Event] = {}

    primary = select(Event).where(Event.coordinator_id == user_id).where(
        Event.is_deleted == False  # noqa: E712
    )
    if status:
        primary = primary.where(Event.status == status)
    for event in session.exec(primary).all():
        found[event.id] = event

    recent = select(Event).where(Event.is_deleted == False)  # noqa: E712
    if status:
        recent = recent.where(Event.status == status)
    recent = recent.order_by(Event.created_at.desc()).limit(
        settings.co_coordinator_scan_window
    )
    for event in session.exec(recent).all():
        if event.has_co_coordinator(user_id):
            found[event.id] = event

    room_event_ids = (
        select(Room.event_id)
        .join(RoomParticipant, RoomParticipant.room_id == Room.id)
        .where(RoomParticipant.user_id == user_id)
        .where(RoomParticipant.is_deleted == False)  # noqa: E712
        .where(Room.is_deleted == False)  # noqa: E712
        .distinct()
    )
    event_ids = [eid for eid in session.exec(room_event_ids).all() if eid not in found]
    if event_ids:
        via_rooms = select(Event).where(Event.id.in_(event_ids)).where(
            Event.is_deleted == False  # noqa: E712
        )
        if status:
            via_rooms = via_rooms.where(Event.status == status)
        for event in session.exec(via_rooms).all():
            found[event.id] = event

    return sorted(found.values(), key=lambda e: e.created_at, reverse=True)
