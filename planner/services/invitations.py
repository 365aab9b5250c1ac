"""Event invitation service.

An invitation is a row with an unguessable token. Delivering the token to
the invitee is up to the caller; nothing is sent from here. Accepting a
pending invitation creates the event membership and main-room access in one
transaction.
"""
import logging
import secrets
from datetime import timedelta
from uuid import UUID

from sqlmodel import Session, select

from planner.access.membership import (
    find_event_member,
    require_event,
    require_event_coordinator,
)
from planner.access.rooms import find_participant
from planner.core.config import settings
from planner.core.database import transaction, utcnow
from planner.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from planner.models import (
    EventInvitation,
    EventMember,
    InvitationStatus,
    Role,
    RoomParticipant,
    User,
)
from planner.services.events import get_main_room

logger = logging.getLogger(__name__)

INVITABLE_ROLES = {Role.COORDINATOR, Role.COLLABORATOR, Role.GUEST}


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def _pending_for_email(session: Session, event_id: UUID, email: str) -> EventInvitation | None:
    statement = (
        select(EventInvitation)
        .where(EventInvitation.event_id == event_id)
        .where(EventInvitation.status == InvitationStatus.PENDING)
        .where(EventInvitation.invited_email == email)
        .where(EventInvitation.is_deleted == False)  # noqa: E712
    )
    return session.exec(statement).first()


def send_invitation(
    session: Session,
    event_id: UUID,
    actor_id: UUID,
    invited_email: str,
    role: Role,
    message: str | None = None,
) -> EventInvitation:
    """Create a pending invitation. Coordinators only."""
    event = require_event_coordinator(session, event_id, actor_id)
    if role not in INVITABLE_ROLES:
        raise ValidationFailed(f"Cannot invite with role {role.value}")
    email = (invited_email or "").strip().lower()
    if "@" not in email:
        raise ValidationFailed("A valid email address is required")

    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        if existing_user.id == event.coordinator_id:
            raise Conflict("User is already the main coordinator of this event")
        if event.has_co_coordinator(existing_user.id):
            raise Conflict("User is already a co-coordinator of this event")
    if _pending_for_email(session, event_id, email):
        raise Conflict("An invitation is already pending for this email")

    with transaction(session):
        invitation = EventInvitation(
            event_id=event_id,
            invited_email=email,
            invited_by=actor_id,
            role=role,
            token=generate_token(),
            expires_at=utcnow() + timedelta(days=settings.invitation_ttl_days),
            message=message,
        )
        session.add(invitation)

    session.refresh(invitation)
    logger.info(f"Invitation {invitation.id} sent for event {event_id} as {role.value}")
    return invitation


def get_invitation_by_token(session: Session, token: str) -> EventInvitation:
    invitation = session.exec(
        select(EventInvitation).where(EventInvitation.token == token)
    ).first()
    if not invitation or invitation.is_deleted:
        raise NotFound("Invitation not found")
    return invitation


def _require_pending(invitation: EventInvitation) -> None:
    if invitation.status != InvitationStatus.PENDING:
        raise Conflict(f"Invitation has already been {invitation.status.value}")


def accept_invitation(session: Session, token: str, user: User) -> EventInvitation:
    """
    Accept a pending invitation on behalf of the invited user.

    Expired invitations are marked expired and rejected. The invitee gets an
    event membership (and co-coordinator status for the coordinator role)
    plus a participant row in the main room.
    """
    invitation = get_invitation_by_token(session, token)
    _require_pending(invitation)

    if utcnow() > invitation.expires_at:
        with transaction(session):
            invitation.status = InvitationStatus.EXPIRED
            session.add(invitation)
        raise Conflict("This invitation has expired")

    if user.email.lower() != invitation.invited_email.lower():
        raise Forbidden("This invitation was sent to a different email address")

    event = require_event(session, invitation.event_id)
    main_room = get_main_room(session, event.id)

    with transaction(session):
        invitation.status = InvitationStatus.ACCEPTED
        invitation.accepted_at = utcnow()
        session.add(invitation)

        if invitation.role == Role.COORDINATOR and not event.has_co_coordinator(user.id):
            if user.id != event.coordinator_id:
                event.co_coordinator_ids = [*event.co_coordinator_ids, str(user.id)]
                event.updated_at = utcnow()
                session.add(event)

        if not find_event_member(session, event.id, user.id):
            session.add(
                EventMember(
                    event_id=event.id,
                    user_id=user.id,
                    role=invitation.role,
                    added_by=invitation.invited_by,
                )
            )

        if main_room and not find_participant(session, main_room.id, user.id):
            session.add(
                RoomParticipant(
                    room_id=main_room.id,
                    user_id=user.id,
                    can_post=True,
                    can_edit=True,
                    can_delete=True,
                    can_manage=invitation.role == Role.COORDINATOR,
                    added_by=invitation.invited_by,
                )
            )

    session.refresh(invitation)
    logger.info(f"User {user.id} accepted invitation {invitation.id} to event {event.id}")
    return invitation


def decline_invitation(session: Session, token: str, user: User) -> EventInvitation:
    invitation = get_invitation_by_token(session, token)
    _require_pending(invitation)
    if user.email.lower() != invitation.invited_email.lower():
        raise Forbidden("This invitation was sent to a different email address")

    with transaction(session):
        invitation.status = InvitationStatus.DECLINED
        invitation.declined_at = utcnow()
        session.add(invitation)

    session.refresh(invitation)
    return invitation


def _require_invitation(session: Session, invitation_id: UUID) -> EventInvitation:
    invitation = session.get(EventInvitation, invitation_id)
    if not invitation or invitation.is_deleted:
        raise NotFound("Invitation not found")
    return invitation


def cancel_invitation(session: Session, invitation_id: UUID, actor_id: UUID) -> EventInvitation:
    invitation = _require_invitation(session, invitation_id)
    require_event_coordinator(session, invitation.event_id, actor_id)
    if invitation.status != InvitationStatus.PENDING:
        raise Conflict(f"Cannot cancel an invitation that has been {invitation.status.value}")

    with transaction(session):
        invitation.status = InvitationStatus.CANCELLED
        invitation.cancelled_at = utcnow()
        session.add(invitation)

    session.refresh(invitation)
    return invitation


def resend_invitation(session: Session, invitation_id: UUID, actor_id: UUID) -> EventInvitation:
    """Issue a fresh token and expiry for a pending or expired invitation."""
    invitation = _require_invitation(session, invitation_id)
    require_event_coordinator(session, invitation.event_id, actor_id)
    if invitation.status not in (InvitationStatus.PENDING, InvitationStatus.EXPIRED):
        raise Conflict(f"Cannot resend an invitation that has been {invitation.status.value}")

    now = utcnow()
    with transaction(session):
        invitation.token = generate_token()
        invitation.expires_at = now + timedelta(days=settings.invitation_ttl_days)
        invitation.status = InvitationStatus.PENDING
        invitation.created_at = now
        session.add(invitation)

    session.refresh(invitation)
    return invitation


def list_invitations_by_event(
    session: Session, event_id: UUID, actor_id: UUID, pending_only: bool = False
) -> list[EventInvitation]:
    """Invitations of an event, newest first. Coordinators only."""
    require_event_coordinator(session, event_id, actor_id)
    statement = (
        select(EventInvitation)
        .where(EventInvitation.event_id == event_id)
        .where(EventInvitation.is_deleted == False)  # noqa: E712
    )
    if pending_only:
        statement = statement.where(EventInvitation.status == InvitationStatus.PENDING)
    return list(session.exec(statement.order_by(EventInvitation.created_at.desc())).all())


def list_invitations_for_user(session: Session, user: User) -> list[EventInvitation]:
    """Pending invitations addressed to the user's e-mail."""
    statement = (
        select(EventInvitation)
        .where(EventInvitation.invited_email == user.email.lower())
        .where(EventInvitation.status == InvitationStatus.PENDING)
        .where(EventInvitation.is_deleted == False)  # noqa: E712
    )
    return list(session.exec(statement).all())
