"""Event membership service."""
import logging
from uuid import UUID

from sqlmodel import Session, select

from planner.access.guard import ensure_not_last_manager, ensure_not_main_coordinator, lock_room
from planner.access.membership import (
    find_event_member,
    is_event_coordinator,
    require_event_access,
    require_event_coordinator,
)
from planner.access.rooms import find_participant
from planner.core.database import transaction, utcnow
from planner.core.errors import Conflict, NotFound, ValidationFailed
from planner.lifecycle.states import mark_soft_deleted
from planner.models import (
    EventInvitation,
    EventMember,
    InvitationStatus,
    Role,
    Room,
    Task,
    TaskStatus,
    User,
)

logger = logging.getLogger(__name__)


def list_event_members(
    session: Session, event_id: UUID, user_id: UUID, role: Role | None = None
) -> list[EventMember]:
    require_event_access(session, event_id, user_id)
    statement = (
        select(EventMember)
        .where(EventMember.event_id == event_id)
        .where(EventMember.is_deleted == False)  # noqa: E712
    )
    if role:
        statement = statement.where(EventMember.role == role)
    return list(session.exec(statement.order_by(EventMember.joined_at)).all())


def add_event_member(
    session: Session, event_id: UUID, actor_id: UUID, user_id: UUID, role: Role
) -> EventMember:
    """Add a user to an event directly. Coordinator roles go through co-coordinators."""
    event = require_event_coordinator(session, event_id, actor_id)
    if role == Role.COORDINATOR:
        raise ValidationFailed("Use co-coordinators to grant the coordinator role")
    if not session.get(User, user_id):
        raise NotFound("User not found")
    if is_event_coordinator(event, user_id) or find_event_member(session, event_id, user_id):
        raise Conflict("User is already a member of this event")

    with transaction(session):
        member = EventMember(event_id=event_id, user_id=user_id, role=role, added_by=actor_id)
        session.add(member)

    session.refresh(member)
    logger.info(f"Added {user_id} to event {event_id} as {role.value}")
    return member


def remove_event_member(session: Session, event_id: UUID, actor_id: UUID, user_id: UUID) -> dict:
    """
    Remove a user from an event with everything that hangs off the membership.

    In one transaction:
    - Soft-delete the user's participant rows in the event's rooms, each
      under the last-manager guard
    - Cancel pending invitations the user sent for this event
    - Unassign the user's open tasks; soft-delete their completed ones
    - Drop co-coordinator status, if any
    - Soft-delete the membership row

    The primary coordinator cannot be removed.
    """
    event = require_event_coordinator(session, event_id, actor_id)
    ensure_not_main_coordinator(event, user_id)

    member = find_event_member(session, event_id, user_id)
    if not member:
        raise NotFound("Event member not found")

    rooms = session.exec(
        select(Room).where(Room.event_id == event_id).where(Room.is_deleted == False)  # noqa: E712
    ).all()
    invitations = session.exec(
        select(EventInvitation)
        .where(EventInvitation.event_id == event_id)
        .where(EventInvitation.invited_by == user_id)
        .where(EventInvitation.status == InvitationStatus.PENDING)
    ).all()
    tasks = session.exec(
        select(Task)
        .where(Task.event_id == event_id)
        .where(Task.assignee_id == user_id)
        .where(Task.is_deleted == False)  # noqa: E712
    ).all()

    now = utcnow()
    summary = {"rooms": 0, "invitations_cancelled": 0, "tasks_unassigned": 0, "tasks_deleted": 0}

    with transaction(session):
        for room in rooms:
            participant = find_participant(session, room.id, user_id)
            if not participant:
                continue
            lock_room(session, room.id)
            ensure_not_last_manager(session, room.id, participant)
            mark_soft_deleted(participant, now)
            session.add(participant)
            summary["rooms"] += 1

        for invitation in invitations:
            invitation.status = InvitationStatus.CANCELLED
            invitation.cancelled_at = now
            session.add(invitation)
            summary["invitations_cancelled"] += 1

        for task in tasks:
            if task.status == TaskStatus.COMPLETED:
                mark_soft_deleted(task, now)
                summary["tasks_deleted"] += 1
            else:
                task.assignee_id = None
                task.updated_at = now
                summary["tasks_unassigned"] += 1
            session.add(task)

        if event.has_co_coordinator(user_id):
            event.co_coordinator_ids = [u for u in event.co_coordinator_ids if u != str(user_id)]
            event.updated_at = now
            session.add(event)

        mark_soft_deleted(member, now)
        session.add(member)

    logger.info(f"Removed member {user_id} from event {event_id}: {summary}")
    return summary
