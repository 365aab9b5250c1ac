"""Event service: creation, updates, co-coordinators, deletion and statistics."""
import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from planner.access.grants import FULL_PERMISSIONS
from planner.access.membership import (
    find_event_member,
    list_user_events,
    require_event,
    require_event_access,
    require_event_coordinator,
    require_main_coordinator,
)
from planner.access.rooms import find_participant
from planner.core.config import settings
from planner.core.database import as_utc, transaction, utcnow
from planner.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from planner.lifecycle.cascade import soft_delete_cascade
from planner.lifecycle.states import mark_soft_deleted
from planner.models import (
    Event,
    EventStatus,
    EventType,
    Expense,
    Role,
    Room,
    RoomParticipant,
    RoomType,
    Task,
    TaskStatus,
    User,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"name", "description", "type", "date", "budget_total", "expected_guests"}


def create_event(
    session: Session,
    creator: User,
    name: str,
    description: str | None = None,
    event_type: EventType = EventType.OTHER,
    date: datetime | None = None,
    budget_total: float = 0,
    expected_guests: int = 0,
) -> Event:
    """
    Create an event with its main room.

    The creator becomes the primary coordinator and gets a full-permission
    participant row in the main room. All three rows are written in one
    transaction.
    """
    if not name or not name.strip():
        raise ValidationFailed("Event name is required")

    with transaction(session):
        event = Event(
            name=name.strip(),
            description=description,
            type=event_type,
            date=as_utc(date),
            budget_total=budget_total,
            expected_guests=expected_guests,
            coordinator_id=creator.id,
            created_by=creator.id,
        )
        session.add(event)
        session.flush()

        main_room = Room(
            event_id=event.id,
            name=f"{event.name} - Main Chat",
            type=RoomType.MAIN,
            created_by=creator.id,
        )
        session.add(main_room)
        session.flush()

        session.add(
            RoomParticipant(
                room_id=main_room.id,
                user_id=creator.id,
                added_by=creator.id,
                **FULL_PERMISSIONS.to_dict(),
            )
        )

    session.refresh(event)
    logger.info(f"Created event {event.id} ({event.name}) for {creator.id}")
    return event


def get_event(session: Session, event_id: UUID, user_id: UUID) -> Event:
    return require_event_access(session, event_id, user_id)


def list_events(session: Session, user_id: UUID, status: EventStatus | None = None) -> list[Event]:
    return list_user_events(session, user_id, status)


def get_main_room(session: Session, event_id: UUID) -> Room | None:
    statement = (
        select(Room)
        .where(Room.event_id == event_id)
        .where(Room.type == RoomType.MAIN)
        .where(Room.is_deleted == False)  # noqa: E712
    )
    return session.exec(statement).first()


def update_event(session: Session, event_id: UUID, user_id: UUID, **changes) -> Event:
    """Update editable event fields. Coordinators only; None values are ignored."""
    event = require_event_coordinator(session, event_id, user_id)
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise ValidationFailed(f"Cannot update fields: {', '.join(sorted(unknown))}")

    with transaction(session):
        for key, value in changes.items():
            if key == "date":
                value = as_utc(value)
            if value is not None:
                setattr(event, key, value)
        event.updated_at = utcnow()
        session.add(event)

    session.refresh(event)
    return event


def update_event_status(
    session: Session, event_id: UUID, user_id: UUID, status: EventStatus
) -> Event:
    event = require_event_coordinator(session, event_id, user_id)
    with transaction(session):
        event.status = status
        event.updated_at = utcnow()
        session.add(event)
    session.refresh(event)
    logger.info(f"Event {event_id} status set to {status.value} by {user_id}")
    return event


def archive_event(session: Session, event_id: UUID, user_id: UUID) -> Event:
    return update_event_status(session, event_id, user_id, EventStatus.ARCHIVED)


def soft_delete_event(session: Session, event_id: UUID, user_id: UUID) -> dict[str, int]:
    """
    Soft-delete an event and everything it owns.

    Only the primary coordinator may do this. Deleting an already deleted
    event raises Conflict. Returns the number of rows marked per table.
    """
    event = require_event(session, event_id, include_deleted=True)
    if event.coordinator_id != user_id:
        raise Forbidden("Only the main coordinator can delete events")

    with transaction(session):
        counts = soft_delete_cascade(session, event, utcnow())
    return dict(counts)


def add_co_coordinator(session: Session, event_id: UUID, user_id: UUID, target_id: UUID) -> Event:
    """
    Make a user a co-coordinator. Primary coordinator only.

    The new co-coordinator also gets a full-permission participant row in
    every live room of the event; an existing row is upgraded.
    """
    event = require_main_coordinator(session, event_id, user_id)
    if not session.get(User, target_id):
        raise NotFound("User not found")
    if target_id == event.coordinator_id:
        raise Conflict("User is already the main coordinator of this event")
    if event.has_co_coordinator(target_id):
        raise Conflict("User is already a co-coordinator")

    rooms = session.exec(
        select(Room).where(Room.event_id == event_id).where(Room.is_deleted == False)  # noqa: E712
    ).all()

    with transaction(session):
        event.co_coordinator_ids = [*event.co_coordinator_ids, str(target_id)]
        event.updated_at = utcnow()
        session.add(event)

        for room in rooms:
            participant = find_participant(session, room.id, target_id)
            if participant:
                for key, value in FULL_PERMISSIONS.to_dict().items():
                    setattr(participant, key, value)
            else:
                participant = RoomParticipant(
                    room_id=room.id,
                    user_id=target_id,
                    added_by=user_id,
                    **FULL_PERMISSIONS.to_dict(),
                )
            session.add(participant)

    session.refresh(event)
    logger.info(f"Added co-coordinator {target_id} to event {event_id}")
    return event


def remove_co_coordinator(
    session: Session, event_id: UUID, user_id: UUID, target_id: UUID
) -> Event:
    """
    Revoke co-coordinator status. Primary coordinator only.

    The user's explicit participant rows across the event's rooms are
    removed unconditionally, and so is a membership row they hold under the
    coordinator role. The primary coordinator keeps implicit management of
    every room, so no room is left without a manager.
    """
    event = require_main_coordinator(session, event_id, user_id)
    if not event.has_co_coordinator(target_id):
        raise NotFound("User is not a co-coordinator")

    rooms = session.exec(
        select(Room).where(Room.event_id == event_id).where(Room.is_deleted == False)  # noqa: E712
    ).all()
    member = find_event_member(session, event_id, target_id)
    now = utcnow()

    with transaction(session):
        for room in rooms:
            participant = find_participant(session, room.id, target_id)
            if participant:
                mark_soft_deleted(participant, now)
                session.add(participant)

        if member and member.role == Role.COORDINATOR:
            mark_soft_deleted(member, now)
            session.add(member)

        event.co_coordinator_ids = [u for u in event.co_coordinator_ids if u != str(target_id)]
        event.updated_at = now
        session.add(event)

    session.refresh(event)
    logger.info(f"Removed co-coordinator {target_id} from event {event_id}")
    return event


def get_event_stats(session: Session, event_id: UUID, user_id: UUID) -> dict:
    """
    Summarize tasks, expenses, rooms and participants of an event.

    Tasks and expenses are sampled up to ``stats_sample_limit`` rows and
    participants up to ``stats_participant_limit`` per room; the ``is_partial``
    flags report when a cap was reached.
    """
    require_event_access(session, event_id, user_id)
    sample_limit = settings.stats_sample_limit
    participant_limit = settings.stats_participant_limit

    sampled_tasks = session.exec(
        select(Task).where(Task.event_id == event_id).limit(sample_limit)
    ).all()
    tasks = [t for t in sampled_tasks if not t.is_deleted]

    sampled_expenses = session.exec(
        select(Expense).where(Expense.event_id == event_id).limit(sample_limit)
    ).all()
    expenses = [e for e in sampled_expenses if not e.is_deleted]

    rooms = session.exec(
        select(Room).where(Room.event_id == event_id).where(Room.is_deleted == False)  # noqa: E712
    ).all()

    participant_ids: set[UUID] = set()
    participants_partial = False
    for room in rooms:
        sampled = session.exec(
            select(RoomParticipant)
            .where(RoomParticipant.room_id == room.id)
            .limit(participant_limit)
        ).all()
        if len(sampled) == participant_limit:
            participants_partial = True
        participant_ids.update(p.user_id for p in sampled if not p.is_deleted)

    return {
        "tasks": {
            "total": len(tasks),
            "completed": sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
            "in_progress": sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            "not_started": sum(1 for t in tasks if t.status == TaskStatus.NOT_STARTED),
            "is_partial": len(sampled_tasks) == sample_limit,
        },
        "expenses": {
            "total": sum(e.amount for e in expenses),
            "count": len(expenses),
            "is_partial": len(sampled_expenses) == sample_limit,
        },
        "rooms": len(rooms),
        "participants": len(participant_ids),
        "participant_count_is_partial": participants_partial,
    }
