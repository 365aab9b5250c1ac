"""User model for authenticated principals."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from planner.core.database import utcnow
from planner.models.base import Role


class User(SQLModel, table=True):
    """An authenticated person using the planner.

    The identity provider supplies the principal id; this row carries the
    profile and the active flag. ``role`` is a coarse global label only and
    is never consulted for event or room access.

    Attributes:
        id: Unique identifier (UUID), the principal id.
        email: Login e-mail address (unique).
        name: Display name.
        role: Coarse global role.
        is_active: Inactive users are rejected at authentication.
        created_at: When the profile was created.
    """
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str
    role: Role = Field(default=Role.COLLABORATOR)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
