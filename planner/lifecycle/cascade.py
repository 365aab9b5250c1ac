"""Cascading soft-delete and operator hard-delete over owned subtrees.

Ownership is declared once in ``OWNERSHIP`` and walked generically, so
adding an owned entity type means adding one line there. Soft delete goes
parent-first inside the caller's transaction. Hard delete goes strictly
child-first so an interrupted run never leaves orphans behind.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, update
from sqlmodel import Session, select

from planner.access.guard import ensure_room_not_main
from planner.core.config import settings
from planner.core.database import transaction
from planner.core.errors import NotFound
from planner.lifecycle.states import mark_soft_deleted
from planner.models import (
    Dashboard,
    Event,
    EventInvitation,
    EventMember,
    Expense,
    Message,
    Poll,
    PollVote,
    Room,
    RoomParticipant,
    SoftDeletable,
    Task,
)

logger = logging.getLogger(__name__)

# entity type -> ordered (child type, foreign key field) pairs
OWNERSHIP: dict[type[SoftDeletable], list[tuple[type[SoftDeletable], str]]] = {
    Event: [
        (Room, "event_id"),
        (EventMember, "event_id"),
        (EventInvitation, "event_id"),
        (Task, "event_id"),
        (Expense, "event_id"),
        (Poll, "event_id"),
        (Dashboard, "event_id"),
    ],
    Room: [
        (RoomParticipant, "room_id"),
        (Message, "room_id"),
    ],
    Poll: [
        (PollVote, "poll_id"),
    ],
}

# Nullable references from rows owned elsewhere; cleared before a hard delete.
REFERENCES: dict[type[SoftDeletable], list[tuple[type[SoftDeletable], str]]] = {
    Room: [(Poll, "room_id")],
}


def _name(model: type[SoftDeletable]) -> str:
    return model.__table__.name


def soft_delete_descendants(
    session: Session, model: type[SoftDeletable], parent_id: UUID, ts: datetime
) -> Counter:
    """Soft-delete every live row owned, directly or transitively, by one parent.

    Rows already deleted are skipped. Returns counts keyed by table name.
    """
    counts: Counter = Counter()
    for child_model, fk in OWNERSHIP.get(model, []):
        statement = (
            select(child_model)
            .where(getattr(child_model, fk) == parent_id)
            .where(child_model.is_deleted == False)  # noqa: E712
        )
        for row in session.exec(statement).all():
            mark_soft_deleted(row, ts)
            session.add(row)
            counts[_name(child_model)] += 1
            if child_model in OWNERSHIP:
                counts.update(soft_delete_descendants(session, child_model, row.id, ts))
    return counts


def soft_delete_cascade(session: Session, root: SoftDeletable, ts: datetime) -> Counter:
    """Soft-delete a root row and everything it owns.

    Raises Conflict when the root is already deleted. Does not commit: call it
    inside ``transaction(session)`` so the subtree is applied atomically.
    """
    mark_soft_deleted(root, ts)
    session.add(root)
    counts = Counter({_name(type(root)): 1})
    counts.update(soft_delete_descendants(session, type(root), root.id, ts))
    session.flush()
    logger.info(f"Soft-deleted {_name(type(root))} {root.id}: {dict(counts)}")
    return counts


def soft_delete_room_cascade(session: Session, room_id: UUID, ts: datetime) -> Counter:
    """Mark a room's participants and messages deleted; message bodies are redacted."""
    return soft_delete_descendants(session, Room, room_id, ts)


def soft_delete_event_cascade(session: Session, event_id: UUID, ts: datetime) -> Counter:
    """Mark every room (with its children) and every event-scoped row deleted."""
    return soft_delete_descendants(session, Event, event_id, ts)


def count_subtree(session: Session, model: type[SoftDeletable], root_id: UUID) -> Counter:
    """Row counts below a root, deleted rows included. Used for dry runs."""
    counts: Counter = Counter()
    for child_model, fk in OWNERSHIP.get(model, []):
        column = getattr(child_model, fk)
        if child_model in OWNERSHIP:
            child_ids = session.exec(select(child_model.id).where(column == root_id)).all()
            counts[_name(child_model)] += len(child_ids)
            for child_id in child_ids:
                counts.update(count_subtree(session, child_model, child_id))
        else:
            total = session.exec(
                select(func.count()).select_from(child_model).where(column == root_id)
            ).one()
            counts[_name(child_model)] += total
    return counts


@dataclass
class HardDeleteReport:
    """Outcome of one hard-delete call.

    ``complete`` is False when the row ceiling was reached; the root is then
    kept and the call should be repeated.
    """

    entity: str
    entity_id: UUID
    complete: bool = False
    deleted: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.deleted.values())


class _Purge:
    """Child-first deletion with a batch size and an overall row ceiling."""

    def __init__(self, session: Session, batch_size: int, max_rows: int):
        self.session = session
        self.batch_size = batch_size
        self.remaining = max_rows
        self.deleted: Counter = Counter()

    def delete_row(self, row: SoftDeletable) -> bool:
        model = type(row)
        if not self.delete_children(model, row.id):
            return False
        if self.remaining <= 0:
            return False
        for ref_model, fk in REFERENCES.get(model, []):
            self.session.exec(
                update(ref_model).where(getattr(ref_model, fk) == row.id).values({fk: None})
            )
        self.session.delete(row)
        self.session.flush()
        self.deleted[_name(model)] += 1
        self.remaining -= 1
        return True

    def delete_children(self, model: type[SoftDeletable], parent_id: UUID) -> bool:
        for child_model, fk in OWNERSHIP.get(model, []):
            column = getattr(child_model, fk)
            while True:
                if self.remaining <= 0:
                    return False
                batch = self.session.exec(
                    select(child_model)
                    .where(column == parent_id)
                    .limit(min(self.batch_size, self.remaining))
                ).all()
                if not batch:
                    break
                for row in batch:
                    if not self.delete_row(row):
                        return False
        return True


def _hard_delete(
    session: Session,
    model: type[SoftDeletable],
    root_id: UUID,
    batch_size: int | None = None,
    max_rows: int | None = None,
) -> HardDeleteReport:
    root = session.get(model, root_id)
    if not root:
        raise NotFound(f"{model.__name__} not found")

    purge = _Purge(
        session,
        batch_size or settings.hard_delete_batch_size,
        max_rows or settings.hard_delete_max_rows,
    )
    report = HardDeleteReport(entity=_name(model), entity_id=root_id)
    with transaction(session):
        report.complete = purge.delete_row(root)
    report.deleted = dict(purge.deleted)

    if report.complete:
        logger.info(f"Hard-deleted {report.entity} {root_id}: {report.deleted}")
    else:
        logger.warning(
            f"Hard delete of {report.entity} {root_id} stopped at the row ceiling "
            f"after {report.total} rows; run again to finish"
        )
    return report


def hard_delete_event(session: Session, event_id: UUID, **limits) -> HardDeleteReport:
    return _hard_delete(session, Event, event_id, **limits)


def hard_delete_room(session: Session, room_id: UUID, **limits) -> HardDeleteReport:
    room = session.get(Room, room_id)
    if room:
        ensure_room_not_main(room, "delete")
    return _hard_delete(session, Room, room_id, **limits)


def hard_delete_poll(session: Session, poll_id: UUID, **limits) -> HardDeleteReport:
    return _hard_delete(session, Poll, poll_id, **limits)
