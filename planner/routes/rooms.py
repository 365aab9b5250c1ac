"""Room routes."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from planner.core.database import get_session
from planner.models import User
from planner.routes.deps import get_current_user
from planner.schemas import RoomRead, RoomUpdate
from planner.services import rooms

router = APIRouter(prefix="/rooms", tags=["rooms"])


@router.get("/{room_id}", response_model=RoomRead)
async def get_room(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return rooms.get_room(session, room_id, user.id)


@router.patch("/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: UUID,
    body: RoomUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return rooms.update_room(
        session,
        room_id,
        user.id,
        name=body.name,
        description=body.description,
        allow_guest_messages=body.allow_guest_messages,
    )


@router.post("/{room_id}/archive", response_model=RoomRead)
async def archive_room(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Archive a room. The main room cannot be archived."""
    return rooms.archive_room(session, room_id, user.id)


@router.delete("/{room_id}")
async def delete_room(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Soft-delete a room with its participants and messages."""
    return {"deleted": rooms.delete_room(session, room_id, user.id)}
