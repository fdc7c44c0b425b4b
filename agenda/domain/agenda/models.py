from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional

from agenda.constants import DEFAULT_PRIORITY, DEFAULT_ROLE
from agenda.domain.common.time import parse_local_date

Priority = Literal["low", "medium", "high"]
NotificationKind = Literal["success", "error"]


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: Optional[str]
    assigned_user_id: Optional[str]
    scheduled_date: Optional[str]  # ISO YYYY-MM-DD, local calendar day
    priority: str
    completed: bool
    created_at: str
    updated_at: str
    assigned_user_name: Optional[str] = None  # joined by list_tasks, never stored

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_date is not None

    @property
    def local_date(self) -> Optional[date]:
        if self.scheduled_date is None:
            return None
        return parse_local_date(self.scheduled_date)


@dataclass(frozen=True)
class User:
    id: str
    name: str
    role: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class TaskInput:
    """Raw form values. Normalized by TaskService before anything is stored."""
    title: str
    description: Optional[str] = None
    assigned_user_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    priority: str = DEFAULT_PRIORITY


@dataclass(frozen=True)
class UserInput:
    name: str
    role: str = DEFAULT_ROLE


@dataclass(frozen=True)
class RoleInfo:
    tag: str
    label: str
    weight: str


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str = ""


@dataclass(frozen=True)
class AgendaStats:
    total: int
    completed: int
    unscheduled: int


@dataclass
class TaskForm:
    """
    Mutable state of the add/edit task dialog.

    assigned_user_id keeps the keyboard encoding: NONE_SENTINEL or "" means
    nobody is selected.
    """
    title: str = ""
    description: str = ""
    assigned_user_id: str = ""
    scheduled_date: Optional[date] = None
    priority: str = DEFAULT_PRIORITY

    def to_input(self) -> TaskInput:
        return TaskInput(
            title=self.title,
            description=self.description,
            assigned_user_id=self.assigned_user_id,
            scheduled_date=self.scheduled_date,
            priority=self.priority,
        )


@dataclass
class UserForm:
    name: str = ""
    role: str = DEFAULT_ROLE

    def to_input(self) -> UserInput:
        return UserInput(name=self.name, role=self.role)


@dataclass
class PendingDelete:
    entity: Literal["task", "user"]
    entity_id: str
    label: str = ""


@dataclass
class DialogState:
    open: bool = False
    editing: Optional[Task] = None
    form: TaskForm = field(default_factory=TaskForm)
