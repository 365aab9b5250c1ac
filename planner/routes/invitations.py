"""Invitation routes."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from planner.core.database import get_session
from planner.models import User
from planner.routes.deps import get_current_user
from planner.schemas import InvitationCreate, InvitationRead
from planner.services import invitations

router = APIRouter(tags=["invitations"])


@router.post(
    "/events/{event_id}/invitations", response_model=InvitationRead, status_code=201
)
async def send_invitation(
    event_id: UUID,
    body: InvitationCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create a pending invitation. The response carries the token to hand out."""
    return invitations.send_invitation(
        session, event_id, user.id, body.invited_email, body.role, body.message
    )


@router.get("/events/{event_id}/invitations", response_model=list[InvitationRead])
async def list_event_invitations(
    event_id: UUID,
    pending_only: bool = False,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.list_invitations_by_event(session, event_id, user.id, pending_only)


@router.get("/invitations/mine", response_model=list[InvitationRead])
async def my_invitations(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.list_invitations_for_user(session, user)


@router.post("/invitations/{token}/accept", response_model=InvitationRead)
async def accept_invitation(
    token: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.accept_invitation(session, token, user)


@router.post("/invitations/{token}/decline", response_model=InvitationRead)
async def decline_invitation(
    token: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.decline_invitation(session, token, user)


@router.post("/invitations/id/{invitation_id}/cancel", response_model=InvitationRead)
async def cancel_invitation(
    invitation_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.cancel_invitation(session, invitation_id, user.id)


@router.post("/invitations/id/{invitation_id}/resend", response_model=InvitationRead)
async def resend_invitation(
    invitation_id: UUID,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return invitations.resend_invitation(session, invitation_id, user.id)
