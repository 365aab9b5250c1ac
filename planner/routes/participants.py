"""Room participant routes."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from planner.access.grants import PermissionFlags
from planner.access.rooms import get_user_room_access, require_room_access
from planner.core.database import get_session
from planner.models import User
from planner.routes.deps import get_current_user
from planner.schemas import (
    BulkAdd,
    NotificationLevelUpdate,
    ParticipantAdd,
    ParticipantRead,
    PermissionsUpdate,
)
from planner.services import participants

router = APIRouter(prefix="/rooms/{room_id}/participants", tags=["participants"])


@router.get("")
async def list_participants(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """List explicit participants plus coordinators with implicit access."""
    return participants.list_room_participants(session, room_id, user.id)


@router.get("/me")
async def my_access(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """The caller's effective permissions in the room."""
    room = require_room_access(session, room_id, user.id)
    flags = get_user_room_access(session, room, user.id)
    return flags.to_dict()


@router.post("", response_model=ParticipantRead, status_code=201)
async def add_participant(
    room_id: UUID,
    body: ParticipantAdd,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    defaults = participants.DEFAULT_PERMISSIONS.to_dict()
    given = body.model_dump(exclude={"user_id"}, exclude_none=True)
    flags = PermissionFlags(**{**defaults, **given})
    return participants.add_participant(session, room_id, user.id, body.user_id, flags)


@router.post("/bulk")
async def add_many(
    room_id: UUID,
    body: BulkAdd,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return participants.add_multiple_members_to_room(session, room_id, user.id, body.user_ids)


@router.put("/me/notifications", response_model=ParticipantRead)
async def update_notifications(
    room_id: UUID,
    body: NotificationLevelUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return participants.update_notification_level(
        session, room_id, user.id, body.notification_level
    )


@router.post("/leave", status_code=204)
async def leave_room(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    participants.leave_room(session, room_id, user.id)


@router.patch("/{user_id}", response_model=ParticipantRead)
async def update_permissions(
    room_id: UUID,
    user_id: UUID,
    body: PermissionsUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return participants.update_permissions(
        session, room_id, user.id, user_id, **body.model_dump(exclude_none=True)
    )


@router.delete("/{user_id}", status_code=204)
async def remove_participant(
    room_id: UUID,
    user_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    participants.remove_participant(session, room_id, user.id, user_id)
