"""Permission grants resolved once per request.

A caller's rights in a room come from one of two places: implicit coordinator
status on the owning event, or an explicit participant row. Resolving to a
grant object up front lets callers branch on the source without re-querying.
"""

from dataclasses import dataclass

from planner.models import RoomParticipant


@dataclass(frozen=True)
class PermissionFlags:
    can_post: bool = False
    can_edit: bool = False
    can_delete: bool = False
    can_manage: bool = False

    def to_dict(self) -> dict:
        return {
            "can_post": self.can_post,
            "can_edit": self.can_edit,
            "can_delete": self.can_delete,
            "can_manage": self.can_manage,
        }


FULL_PERMISSIONS = PermissionFlags(
    can_post=True, can_edit=True, can_delete=True, can_manage=True
)


@dataclass(frozen=True)
class ImplicitCoordinatorGrant:
    """Full rights derived from being a coordinator of the room's event."""

    @property
    def flags(self) -> PermissionFlags:
        return FULL_PERMISSIONS

    @property
    def participant(self) -> None:
        return None


@dataclass(frozen=True)
class ExplicitParticipantGrant:
    """Rights read from a live RoomParticipant row."""

    participant: RoomParticipant

    @property
    def flags(self) -> PermissionFlags:
        p = self.participant
        return PermissionFlags(
            can_post=p.can_post,
            can_edit=p.can_edit,
            can_delete=p.can_delete,
            can_manage=p.can_manage,
        )


RoomGrant = ImplicitCoordinatorGrant | ExplicitParticipantGrant
