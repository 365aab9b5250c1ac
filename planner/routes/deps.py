"""Shared route dependencies."""
from uuid import UUID

from fastapi import Depends, Header
from sqlmodel import Session

from planner.core.database import get_session
from planner.core.errors import Unauthorized
from planner.models import User


def get_current_user(
    x_user_id: str | None = Header(default=None),
    session: Session = Depends(get_session),
) -> User:
    """
    Load the authenticated user.

    The upstream identity provider puts the principal id in ``X-User-Id``.
    A missing or unknown id and an inactive account are all rejected.
    """
    if not x_user_id:
        raise Unauthorized()
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise Unauthorized("Unauthorized: Invalid user id") from None

    user = session.get(User, user_id)
    if not user:
        raise Unauthorized("Unauthorized: Unknown user")
    if not user.is_active:
        raise Unauthorized("Account is inactive")
    return user
