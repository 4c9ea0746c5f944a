# src/flowstate/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

INBOX_ID = "inbox"
TODAY_VIEW = "today"


class Priority(StrEnum):
    """
    Task priority.

    rank is the sort position: urgent first, low last.
    """

    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def from_raw(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).lower())
        except Exception:
            return cls.MEDIUM


_PRIORITY_RANK = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.MEDIUM: 2,
    Priority.LOW: 3,
}


def _dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def to_local_naive(value: datetime | None) -> datetime | None:
    """Aware datetimes become naive local time; all stored datetimes are naive."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def _str_to_dt(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        return to_local_naive(datetime.fromisoformat(str(raw)))
    except ValueError:
        return None


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    order: int

    description: str | None = None
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    project_id: str | None = INBOX_ID
    labels: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
            "priority": self.priority.value,
            "due_date": _dt_to_str(self.due_date),
            "project_id": self.project_id,
            "labels": list(self.labels),
            "created_at": _dt_to_str(self.created_at),
            "updated_at": _dt_to_str(self.updated_at),
            "order": self.order,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Task:
        created = _str_to_dt(d.get("created_at")) or datetime.fromtimestamp(0)
        return cls(
            id=str(d["id"]),
            title=str(d.get("title") or ""),
            created_at=created,
            updated_at=_str_to_dt(d.get("updated_at")) or created,
            order=int(d.get("order") or 0),
            description=d.get("description"),
            completed=bool(d.get("completed", False)),
            priority=Priority.from_raw(d.get("priority")),
            due_date=_str_to_dt(d.get("due_date")),
            project_id=d.get("project_id", INBOX_ID),
            labels=[str(x) for x in d.get("labels") or []],
        )


@dataclass(slots=True)
class Project:
    id: str
    name: str
    color: str
    created_at: datetime
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "created_at": _dt_to_str(self.created_at),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Project:
        return cls(
            id=str(d["id"]),
            name=str(d.get("name") or ""),
            color=str(d.get("color") or ""),
            created_at=_str_to_dt(d.get("created_at")) or datetime.fromtimestamp(0),
            icon=d.get("icon"),
        )


@dataclass(slots=True)
class Label:
    id: str
    name: str
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Label:
        return cls(id=str(d["id"]), name=str(d.get("name") or ""), color=str(d.get("color") or ""))


@dataclass(slots=True)
class TaskFilters:
    """
    View filter state. Pure state: setting a filter never touches task data.

    project may be a project id or one of the pseudo-views "today" / "inbox".
    """

    project: str | None = None
    label: str | None = None
    search: str = ""
    show_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "label": self.label,
            "search": self.search,
            "show_completed": self.show_completed,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> TaskFilters:
        return cls(
            project=d.get("project"),
            label=d.get("label"),
            search=str(d.get("search") or ""),
            show_completed=bool(d.get("show_completed", False)),
        )


@dataclass(slots=True)
class TaskGroups:
    """Incomplete tasks bucketed by due date, plus the visible completed ones."""

    overdue: list[Task] = field(default_factory=list)
    today: list[Task] = field(default_factory=list)
    tomorrow: list[Task] = field(default_factory=list)
    upcoming: list[Task] = field(default_factory=list)
    no_due: list[Task] = field(default_factory=list)
    completed: list[Task] = field(default_factory=list)

    def sections(self) -> list[tuple[str, list[Task]]]:
        return [
            ("Overdue", self.overdue),
            ("Today", self.today),
            ("Tomorrow", self.tomorrow),
            ("Upcoming", self.upcoming),
            ("No due date", self.no_due),
            ("Completed", self.completed),
        ]

    def __len__(self) -> int:
        return sum(len(tasks) for _, tasks in self.sections())


def next_task_key(task: Task) -> tuple[int, int, datetime, int]:
    """Priority rank, then dated before undated (earliest first), then manual order."""
    if task.due_date is not None:
        return (task.priority.rank, 0, task.due_date, task.order)
    return (task.priority.rank, 1, datetime.min, task.order)


def priority_order_key(task: Task) -> tuple[int, int]:
    return (task.priority.rank, task.order)
