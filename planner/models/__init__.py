from planner.models.base import Role, SoftDeletable
from planner.models.dashboard import Dashboard
from planner.models.event import Event, EventStatus, EventType
from planner.models.expense import Expense
from planner.models.membership import EventInvitation, EventMember, InvitationStatus
from planner.models.message import DELETED_MESSAGE_TEXT, Message
from planner.models.poll import Poll, PollVote
from planner.models.room import NotificationLevel, Room, RoomParticipant, RoomType
from planner.models.task import Task, TaskPriority, TaskStatus
from planner.models.user import User

__all__ = [
    "DELETED_MESSAGE_TEXT",
    "Dashboard",
    "Event",
    "EventInvitation",
    "EventMember",
    "EventStatus",
    "EventType",
    "Expense",
    "InvitationStatus",
    "Message",
    "NotificationLevel",
    "Poll",
    "PollVote",
    "Role",
    "Room",
    "RoomParticipant",
    "RoomType",
    "SoftDeletable",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "User",
]
