"""Event-scoped planning content: tasks, expenses, polls, votes and dashboards.

Any member of the event may read and write its content. The ``list_*_by_event``
functions are plain store queries without an access check; callers
authorize first.
"""
import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from planner.access.membership import require_event_access
from planner.core.database import as_utc, transaction, utcnow
from planner.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from planner.lifecycle.cascade import soft_delete_cascade
from planner.lifecycle.states import mark_soft_deleted
from planner.models import (
    Dashboard,
    Expense,
    Poll,
    PollVote,
    SoftDeletable,
    Task,
    TaskPriority,
    TaskStatus,
)

logger = logging.getLogger(__name__)


def _live_by_event(session: Session, model: type[SoftDeletable], event_id: UUID) -> list:
    statement = (
        select(model)
        .where(model.event_id == event_id)
        .where(model.is_deleted == False)  # noqa: E712
        .order_by(model.created_at)
    )
    return list(session.exec(statement).all())


def _require_live(session: Session, model: type[SoftDeletable], row_id: UUID):
    row = session.get(model, row_id)
    if not row or row.is_deleted:
        raise NotFound(f"{model.__name__} not found")
    return row


def list_tasks_by_event(session: Session, event_id: UUID) -> list[Task]:
    return _live_by_event(session, Task, event_id)


def list_expenses_by_event(session: Session, event_id: UUID) -> list[Expense]:
    return _live_by_event(session, Expense, event_id)


def list_polls_by_event(session: Session, event_id: UUID) -> list[Poll]:
    return _live_by_event(session, Poll, event_id)


def list_dashboards_by_event(session: Session, event_id: UUID) -> list[Dashboard]:
    return _live_by_event(session, Dashboard, event_id)


# Tasks

def create_task(
    session: Session,
    event_id: UUID,
    user_id: UUID,
    title: str,
    description: str | None = None,
    assignee_id: UUID | None = None,
    priority: TaskPriority = TaskPriority.MEDIUM,
    due_date: datetime | None = None,
) -> Task:
    require_event_access(session, event_id, user_id)
    if not title or not title.strip():
        raise ValidationFailed("Task title is required")

    with transaction(session):
        task = Task(
            event_id=event_id,
            title=title.strip(),
            description=description,
            assignee_id=assignee_id,
            priority=priority,
            due_date=as_utc(due_date),
            created_by=user_id,
        )
        session.add(task)

    session.refresh(task)
    return task


def update_task_status(session: Session, task_id: UUID, user_id: UUID, status: TaskStatus) -> Task:
    task = _require_live(session, Task, task_id)
    require_event_access(session, task.event_id, user_id)

    with transaction(session):
        task.status = status
        task.completed_at = utcnow() if status == TaskStatus.COMPLETED else None
        task.updated_at = utcnow()
        session.add(task)

    session.refresh(task)
    return task


def remove_task(session: Session, task_id: UUID, user_id: UUID) -> None:
    task = _require_live(session, Task, task_id)
    require_event_access(session, task.event_id, user_id)
    with transaction(session):
        mark_soft_deleted(task, utcnow())
        session.add(task)


# Expenses

def create_expense(
    session: Session,
    event_id: UUID,
    user_id: UUID,
    description: str,
    amount: float,
    category: str | None = None,
    paid_by: UUID | None = None,
) -> Expense:
    require_event_access(session, event_id, user_id)
    if amount <= 0:
        raise ValidationFailed("Expense amount must be positive")

    with transaction(session):
        expense = Expense(
            event_id=event_id,
            description=description,
            amount=amount,
            category=category,
            paid_by=paid_by or user_id,
            created_by=user_id,
        )
        session.add(expense)

    session.refresh(expense)
    return expense


def remove_expense(session: Session, expense_id: UUID, user_id: UUID) -> None:
    expense = _require_live(session, Expense, expense_id)
    require_event_access(session, expense.event_id, user_id)
    with transaction(session):
        mark_soft_deleted(expense, utcnow())
        session.add(expense)


# Polls

def create_poll(
    session: Session,
    event_id: UUID,
    user_id: UUID,
    question: str,
    options: list[str],
    room_id: UUID | None = None,
    allow_multiple_choices: bool = False,
) -> Poll:
    require_event_access(session, event_id, user_id)
    choices = [o.strip() for o in options if o and o.strip()]
    if len(choices) < 2:
        raise ValidationFailed("Poll must have at least 2 options")

    with transaction(session):
        poll = Poll(
            event_id=event_id,
            room_id=room_id,
            question=question,
            options=[{"id": str(i), "text": text} for i, text in enumerate(choices)],
            allow_multiple_choices=allow_multiple_choices,
            created_by=user_id,
        )
        session.add(poll)

    session.refresh(poll)
    return poll


def set_poll_closed(session: Session, poll_id: UUID, user_id: UUID, closed: bool) -> Poll:
    poll = _require_live(session, Poll, poll_id)
    require_event_access(session, poll.event_id, user_id)
    with transaction(session):
        poll.is_closed = closed
        session.add(poll)
    session.refresh(poll)
    return poll


def remove_poll(session: Session, poll_id: UUID, user_id: UUID) -> dict[str, int]:
    """Soft-delete a poll together with its votes."""
    poll = _require_live(session, Poll, poll_id)
    require_event_access(session, poll.event_id, user_id)
    with transaction(session):
        counts = soft_delete_cascade(session, poll, utcnow())
    return dict(counts)


def cast_vote(session: Session, poll_id: UUID, user_id: UUID, option_ids: list[str]) -> PollVote:
    """Record or replace the caller's vote on an open poll."""
    poll = _require_live(session, Poll, poll_id)
    require_event_access(session, poll.event_id, user_id)
    if poll.is_closed:
        raise Conflict("This poll is closed")
    if not option_ids:
        raise ValidationFailed("Select at least one option")
    if len(option_ids) > 1 and not poll.allow_multiple_choices:
        raise ValidationFailed("This poll only allows selecting one option")
    valid = {o["id"] for o in poll.options}
    for option_id in option_ids:
        if option_id not in valid:
            raise ValidationFailed(f"Invalid option id: {option_id}")

    vote = session.exec(
        select(PollVote)
        .where(PollVote.poll_id == poll_id)
        .where(PollVote.user_id == user_id)
        .where(PollVote.is_deleted == False)  # noqa: E712
    ).first()

    with transaction(session):
        if vote:
            vote.option_ids = list(option_ids)
        else:
            vote = PollVote(poll_id=poll_id, user_id=user_id, option_ids=list(option_ids))
        session.add(vote)

    session.refresh(vote)
    return vote


def list_votes(session: Session, poll_id: UUID, user_id: UUID) -> list[PollVote]:
    poll = _require_live(session, Poll, poll_id)
    require_event_access(session, poll.event_id, user_id)
    statement = (
        select(PollVote)
        .where(PollVote.poll_id == poll_id)
        .where(PollVote.is_deleted == False)  # noqa: E712
    )
    return list(session.exec(statement).all())


# Dashboards

def create_dashboard(
    session: Session, event_id: UUID, user_id: UUID, name: str | None = None, config: dict | None = None
) -> Dashboard:
    require_event_access(session, event_id, user_id)
    with transaction(session):
        dashboard = Dashboard(event_id=event_id, user_id=user_id, name=name, config=config or {})
        session.add(dashboard)
    session.refresh(dashboard)
    return dashboard


def remove_dashboard(session: Session, dashboard_id: UUID, user_id: UUID) -> None:
    dashboard = _require_live(session, Dashboard, dashboard_id)
    if dashboard.user_id != user_id:
        raise Forbidden("Not your dashboard")
    with transaction(session):
        mark_soft_deleted(dashboard, utcnow())
        session.add(dashboard)
