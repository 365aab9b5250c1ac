"""Message routes."""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from planner.core.database import get_session
from planner.models import User
from planner.routes.deps import get_current_user
from planner.schemas import MessageCreate, MessageRead
from planner.services import messages

router = APIRouter(tags=["messages"])


@router.get("/rooms/{room_id}/messages", response_model=list[MessageRead])
async def list_messages(
    room_id: UUID,
    limit: int | None = None,
    before: datetime | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Newest messages first; pass ``before`` to page back."""
    return messages.list_messages(session, room_id, user.id, limit, before)


@router.post("/rooms/{room_id}/messages", response_model=MessageRead, status_code=201)
async def send_message(
    room_id: UUID,
    body: MessageCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return messages.send_message(session, room_id, user.id, body.text)


@router.post("/rooms/{room_id}/read")
async def mark_read(
    room_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return {"updated": messages.mark_room_as_read(session, room_id, user.id)}


@router.get("/messages/unread")
async def unread_counts(
    event_id: UUID | None = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return messages.get_unread_counts(session, user.id, event_id)


@router.patch("/messages/{message_id}", response_model=MessageRead)
async def edit_message(
    message_id: UUID,
    body: MessageCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return messages.edit_message(session, message_id, user.id, body.text)


@router.delete("/messages/{message_id}", response_model=MessageRead)
async def delete_message(
    message_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return messages.delete_message(session, message_id, user.id)
