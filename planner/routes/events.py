"""Event routes: events, co-coordinators, members and event-scoped listings."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from planner.access.membership import require_event_access
from planner.core.database import get_session
from planner.models import EventStatus, Role, User
from planner.routes.deps import get_current_user
from planner.schemas import (
    EventCreate,
    EventRead,
    EventStatusUpdate,
    EventUpdate,
    MemberAdd,
    MemberRead,
    RoomCreate,
    RoomRead,
    UserRef,
)
from planner.services import content, events, members, rooms

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventRead, status_code=201)
async def create_event(
    body: EventCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create an event with its main room; the caller becomes primary coordinator."""
    return events.create_event(
        session,
        user,
        name=body.name,
        description=body.description,
        event_type=body.type,
        date=body.date,
        budget_total=body.budget_total,
        expected_guests=body.expected_guests,
    )


@router.get("", response_model=list[EventRead])
async def list_events(
    status: EventStatus | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List every event the caller coordinates or participates in, newest first."""
    return events.list_events(session, user.id, status)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.get_event(session, event_id, user.id)


@router.patch("/{event_id}", response_model=EventRead)
async def update_event(
    event_id: UUID,
    body: EventUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.update_event(session, event_id, user.id, **body.model_dump(exclude_unset=True))


@router.put("/{event_id}/status", response_model=EventRead)
async def update_event_status(
    event_id: UUID,
    body: EventStatusUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.update_event_status(session, event_id, user.id, body.status)


@router.post("/{event_id}/archive", response_model=EventRead)
async def archive_event(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.archive_event(session, event_id, user.id)


@router.delete("/{event_id}")
async def delete_event(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Soft-delete an event and everything it owns.

    Only the primary coordinator may delete. Returns the number of rows
    marked deleted per table.
    """
    return {"deleted": events.soft_delete_event(session, event_id, user.id)}


@router.get("/{event_id}/stats")
async def event_stats(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.get_event_stats(session, event_id, user.id)


@router.post("/{event_id}/co-coordinators", response_model=EventRead)
async def add_co_coordinator(
    event_id: UUID,
    body: UserRef,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.add_co_coordinator(session, event_id, user.id, body.user_id)


@router.delete("/{event_id}/co-coordinators/{user_id}", response_model=EventRead)
async def remove_co_coordinator(
    event_id: UUID,
    user_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return events.remove_co_coordinator(session, event_id, user.id, user_id)


@router.get("/{event_id}/members", response_model=list[MemberRead])
async def list_members(
    event_id: UUID,
    role: Role | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return members.list_event_members(session, event_id, user.id, role)


@router.post("/{event_id}/members", response_model=MemberRead, status_code=201)
async def add_member(
    event_id: UUID,
    body: MemberAdd,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return members.add_event_member(session, event_id, user.id, body.user_id, body.role)


@router.delete("/{event_id}/members/{user_id}")
async def remove_member(
    event_id: UUID,
    user_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Remove a member, their room access, pending invitations and task assignments."""
    return members.remove_event_member(session, event_id, user.id, user_id)


@router.get("/{event_id}/rooms", response_model=list[RoomRead])
async def list_rooms(
    event_id: UUID,
    include_archived: bool = False,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List the rooms of an event the caller can open."""
    return rooms.list_accessible_rooms(session, event_id, user.id, include_archived)


@router.post("/{event_id}/rooms", response_model=RoomRead, status_code=201)
async def create_room(
    event_id: UUID,
    body: RoomCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return rooms.create_room(
        session,
        event_id,
        user.id,
        name=body.name,
        room_type=body.type,
        description=body.description,
        vendor_id=body.vendor_id,
        allow_guest_messages=body.allow_guest_messages,
    )


@router.get("/{event_id}/tasks")
async def list_tasks(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_event_access(session, event_id, user.id)
    return content.list_tasks_by_event(session, event_id)


@router.get("/{event_id}/expenses")
async def list_expenses(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_event_access(session, event_id, user.id)
    return content.list_expenses_by_event(session, event_id)


@router.get("/{event_id}/polls")
async def list_polls(
    event_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    require_event_access(session, event_id, user.id)
    return content.list_polls_by_event(session, event_id)
