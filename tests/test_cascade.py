"""Tests for lifecycle transitions, cascading soft delete and hard delete."""

from uuid import uuid4

import pytest
from sqlmodel import Session, select

from planner.core.database import utcnow
from planner.core.errors import Conflict, Forbidden, NotFound
from planner.lifecycle.cascade import (
    OWNERSHIP,
    count_subtree,
    hard_delete_event,
    hard_delete_poll,
    hard_delete_room,
    soft_delete_room_cascade,
)
from planner.lifecycle.states import LifecycleState, mark_soft_deleted, state_of
from planner.models import (
    DELETED_MESSAGE_TEXT,
    Dashboard,
    Event,
    EventInvitation,
    EventMember,
    EventStatus,
    Expense,
    Message,
    Poll,
    PollVote,
    Role,
    Room,
    RoomParticipant,
    Task,
    User,
)
from planner.services import content, events, invitations, members, messages, participants, rooms


@pytest.fixture(name="populated_event")
def populated_event_fixture(
    session: Session, event: Event, topic_room: Room, coordinator: User, guest: User
) -> Event:
    """An event with at least one row of every owned type."""
    members.add_event_member(session, event.id, coordinator.id, guest.id, Role.COLLABORATOR)
    participants.add_participant(session, topic_room.id, coordinator.id, guest.id)
    messages.send_message(session, topic_room.id, guest.id, "Menu draft attached")
    invitations.send_invitation(session, event.id, coordinator.id, "dj@example.com", Role.GUEST)
    content.create_task(session, event.id, guest.id, "Book caterer")
    content.create_expense(session, event.id, guest.id, "Deposit", 500)
    poll = content.create_poll(session, event.id, guest.id, "Dinner?", ["Fish", "Beef"])
    content.cast_vote(session, poll.id, guest.id, ["0"])
    content.create_dashboard(session, event.id, guest.id, "Overview")
    return event


class TestStates:
    """Tests for the per-row state transition."""

    def test_state_of(self, session: Session, topic_room: Room):
        assert state_of(topic_room) == LifecycleState.ACTIVE
        assert state_of(None) == LifecycleState.HARD_DELETED

    def test_mark_soft_deleted(self, main_room: Room, coordinator: User):
        message = Message(room_id=main_room.id, author_id=coordinator.id, text="hello")
        ts = utcnow()

        mark_soft_deleted(message, ts)

        assert state_of(message) == LifecycleState.SOFT_DELETED
        assert message.deleted_at == ts
        assert message.text == DELETED_MESSAGE_TEXT

    def test_double_soft_delete_conflict(self, main_room: Room, coordinator: User):
        message = Message(room_id=main_room.id, author_id=coordinator.id, text="hello")
        mark_soft_deleted(message, utcnow())

        with pytest.raises(Conflict, match="Message is already deleted"):
            mark_soft_deleted(message, utcnow())


class TestOwnership:
    """Tests for the ownership table."""

    def test_event_children_order(self):
        assert [child for child, _ in OWNERSHIP[Event]] == [
            Room,
            EventMember,
            EventInvitation,
            Task,
            Expense,
            Poll,
            Dashboard,
        ]
        assert OWNERSHIP[Room] == [(RoomParticipant, "room_id"), (Message, "room_id")]
        assert OWNERSHIP[Poll] == [(PollVote, "poll_id")]


class TestSoftDeleteEvent:
    """Tests for cascading soft delete of an event."""

    def test_cascade_empties_listings(
        self, session: Session, populated_event: Event, coordinator: User
    ):
        """Test every event-scoped listing is empty after the cascade."""
        counts = events.soft_delete_event(session, populated_event.id, coordinator.id)

        assert counts["event"] == 1
        assert counts["room"] == 2
        assert counts["room_participant"] == 3
        assert counts["poll_vote"] == 1
        assert rooms.list_rooms_by_event(session, populated_event.id) == []
        assert content.list_tasks_by_event(session, populated_event.id) == []
        assert content.list_expenses_by_event(session, populated_event.id) == []
        assert content.list_polls_by_event(session, populated_event.id) == []
        assert content.list_dashboards_by_event(session, populated_event.id) == []

    def test_rows_kept_as_tombstones(
        self, session: Session, populated_event: Event, coordinator: User
    ):
        """Test soft-deleted rows are still loadable by id and carry a timestamp."""
        task = content.list_tasks_by_event(session, populated_event.id)[0]
        events.soft_delete_event(session, populated_event.id, coordinator.id)

        loaded = session.get(Task, task.id)
        assert loaded.is_deleted is True
        assert loaded.deleted_at is not None

        event = session.get(Event, populated_event.id)
        assert event.is_deleted is True
        assert event.status == EventStatus.CANCELLED

        for message in session.exec(select(Message)).all():
            assert message.is_deleted is True
            assert message.text == DELETED_MESSAGE_TEXT
        for member in session.exec(select(EventMember)).all():
            assert member.is_deleted is True
        for vote in session.exec(select(PollVote)).all():
            assert vote.is_deleted is True

    def test_second_soft_delete_conflict(
        self, session: Session, event: Event, coordinator: User
    ):
        events.soft_delete_event(session, event.id, coordinator.id)

        with pytest.raises(Conflict, match="Event is already deleted"):
            events.soft_delete_event(session, event.id, coordinator.id)

    def test_only_main_coordinator_deletes(
        self, session: Session, event: Event, coordinator: User, co_coordinator: User
    ):
        events.add_co_coordinator(session, event.id, coordinator.id, co_coordinator.id)

        with pytest.raises(Forbidden):
            events.soft_delete_event(session, event.id, co_coordinator.id)

    def test_deleted_children_skipped(
        self, session: Session, event: Event, topic_room: Room, coordinator: User
    ):
        """Test a room deleted earlier keeps its original deletion time."""
        rooms.delete_room(session, topic_room.id, coordinator.id)
        first_deleted_at = session.get(Room, topic_room.id).deleted_at

        counts = events.soft_delete_event(session, event.id, coordinator.id)

        assert counts["room"] == 1
        assert session.get(Room, topic_room.id).deleted_at == first_deleted_at


class TestSoftDeleteRoom:
    """Tests for cascading soft delete of a room."""

    def test_room_cascade(
        self, session: Session, event: Event, topic_room: Room, coordinator: User, guest: User
    ):
        participants.add_participant(session, topic_room.id, coordinator.id, guest.id)
        message = messages.send_message(session, topic_room.id, guest.id, "hello")

        counts = rooms.delete_room(session, topic_room.id, coordinator.id)

        assert counts == {"room": 1, "room_participant": 2, "message": 1}
        assert session.get(Message, message.id).text == DELETED_MESSAGE_TEXT
        assert topic_room.id not in [r.id for r in rooms.list_rooms_by_event(session, event.id)]

    def test_descendants_only(
        self, session: Session, topic_room: Room, coordinator: User
    ):
        """Test the room helper marks children but leaves the room row to the caller."""
        counts = soft_delete_room_cascade(session, topic_room.id, utcnow())
        session.commit()

        assert counts["room_participant"] == 1
        assert session.get(Room, topic_room.id).is_deleted is False

    def test_room_polls_survive(
        self, session: Session, event: Event, topic_room: Room, coordinator: User
    ):
        """Test polls belong to the event, not the room they were created in."""
        poll = content.create_poll(
            session, event.id, coordinator.id, "Theme?", ["Boho", "Classic"], room_id=topic_room.id
        )

        rooms.delete_room(session, topic_room.id, coordinator.id)

        assert [p.id for p in content.list_polls_by_event(session, event.id)] == [poll.id]

    def test_remove_poll_cascades_votes(
        self, session: Session, event: Event, coordinator: User
    ):
        poll = content.create_poll(session, event.id, coordinator.id, "Date?", ["May", "June"])
        content.cast_vote(session, poll.id, coordinator.id, ["1"])

        counts = content.remove_poll(session, poll.id, coordinator.id)

        assert counts == {"poll": 1, "poll_vote": 1}


class TestHardDelete:
    """Tests for operator hard delete."""

    def test_event_subtree_removed(self, session: Session, populated_event: Event):
        event_id = populated_event.id
        expected = count_subtree(session, Event, event_id)

        report = hard_delete_event(session, event_id)

        assert report.complete is True
        assert report.deleted["event"] == 1
        for table, count in expected.items():
            assert report.deleted.get(table, 0) == count
        assert session.get(Event, event_id) is None
        assert session.exec(select(Room).where(Room.event_id == event_id)).all() == []
        assert session.exec(select(PollVote)).all() == []

    def test_soft_deleted_event_can_be_hard_deleted(
        self, session: Session, event: Event, coordinator: User
    ):
        events.soft_delete_event(session, event.id, coordinator.id)

        report = hard_delete_event(session, event.id)

        assert report.complete is True
        assert session.get(Event, event.id) is None

    def test_ceiling_keeps_parent(self, session: Session, event: Event):
        """Test a run that hits the row ceiling keeps the root and can be resumed."""
        first = hard_delete_event(session, event.id, max_rows=1)

        assert first.complete is False
        assert first.total == 1
        assert session.get(Event, event.id) is not None

        passes = 1
        report = first
        while not report.complete:
            report = hard_delete_event(session, event.id, max_rows=1)
            passes += 1

        assert passes == 3
        assert session.get(Event, event.id) is None

    def test_small_batches(self, session: Session, populated_event: Event):
        report = hard_delete_event(session, populated_event.id, batch_size=1)

        assert report.complete is True
        assert session.exec(select(Message)).all() == []

    def test_room_hard_delete_detaches_polls(
        self, session: Session, event: Event, topic_room: Room, coordinator: User
    ):
        poll = content.create_poll(
            session, event.id, coordinator.id, "Theme?", ["Boho", "Classic"], room_id=topic_room.id
        )

        report = hard_delete_room(session, topic_room.id)

        assert report.complete is True
        assert session.get(Room, topic_room.id) is None
        assert session.get(Poll, poll.id).room_id is None

    def test_main_room_hard_delete_rejected(self, session: Session, main_room: Room):
        with pytest.raises(Conflict):
            hard_delete_room(session, main_room.id)

    def test_poll_hard_delete(self, session: Session, event: Event, coordinator: User):
        poll = content.create_poll(session, event.id, coordinator.id, "Date?", ["May", "June"])
        content.cast_vote(session, poll.id, coordinator.id, ["0"])

        report = hard_delete_poll(session, poll.id)

        assert report.deleted == {"poll_vote": 1, "poll": 1}

    def test_missing_root(self, session: Session):
        with pytest.raises(NotFound):
            hard_delete_event(session, uuid4())
