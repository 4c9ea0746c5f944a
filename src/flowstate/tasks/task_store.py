# src/flowstate/tasks/task_store.py

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..core.ports import Clock, Snapshot, SnapshotRepo, system_clock
from .grouping import group_tasks
from .task_models import (
    INBOX_ID,
    Label,
    Priority,
    Project,
    Task,
    TaskFilters,
    TaskGroups,
    next_task_key,
    to_local_naive,
)

logger = logging.getLogger(__name__)

_UNSET: Any = object()

INBOX_COLOR = "#6366f1"


class ProtectedProjectError(ValueError):
    """Raised when deleting a project that must always exist (the inbox)."""


def generate_id() -> str:
    """Generate a short unique ID."""
    return uuid.uuid4().hex[:12]


class TaskStore:
    """
    In-memory task/project/label container with filter and focus state.

    Persistence:
    - with a SnapshotRepo: load once on construction, save the full state after every mutation
    - without one: purely in-memory

    Unknown ids are silent no-ops for every mutation.
    """

    def __init__(self, snapshot: SnapshotRepo | None = None, *, clock: Clock = system_clock) -> None:
        self._snapshot = snapshot
        self._clock = clock

        self._tasks: list[Task] = []
        self._projects: list[Project] = []
        self._labels: list[Label] = []
        self.filters = TaskFilters()
        self.focus_mode = False
        self.current_focus_task: str | None = None

        data = snapshot.load() if snapshot is not None else None
        if data:
            self._restore(data)
        self._ensure_inbox()

        logger.info(
            "TaskStore ready tasks=%d projects=%d labels=%d",
            len(self._tasks),
            len(self._projects),
            len(self._labels),
        )

    # ---- low-level helpers ----

    def _ensure_inbox(self) -> None:
        if any(p.id == INBOX_ID for p in self._projects):
            return
        inbox = Project(id=INBOX_ID, name="Inbox", color=INBOX_COLOR, created_at=self._clock())
        self._projects.insert(0, inbox)

    def _commit(self) -> None:
        if self._snapshot is not None:
            self._snapshot.save(self.to_snapshot())

    def _find(self, task_id: str) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def _restore(self, data: Snapshot) -> None:
        collections = (
            ("tasks", Task, self._tasks),
            ("projects", Project, self._projects),
            ("labels", Label, self._labels),
        )
        for key, model, target in collections:
            raw_items = data.get(key) or []
            if not isinstance(raw_items, list):
                logger.warning("Snapshot field %s is not a list; ignoring it.", key)
                continue
            for raw in raw_items:
                if not isinstance(raw, dict):
                    logger.warning("Skipping malformed %s entry in snapshot: %r", key, raw)
                    continue
                try:
                    target.append(model.from_dict(raw))
                except (KeyError, TypeError, ValueError):
                    logger.warning("Skipping malformed %s entry in snapshot: %r", key, raw)

        filters = data.get("filters")
        if isinstance(filters, dict):
            self.filters = TaskFilters.from_dict(filters)
        self.focus_mode = bool(data.get("focus_mode", False))
        current = data.get("current_focus_task")
        self.current_focus_task = str(current) if current else None

    def to_snapshot(self) -> Snapshot:
        return {
            "tasks": [t.to_dict() for t in self._tasks],
            "projects": [p.to_dict() for p in self._projects],
            "labels": [lb.to_dict() for lb in self._labels],
            "filters": self.filters.to_dict(),
            "focus_mode": self.focus_mode,
            "current_focus_task": self.current_focus_task,
        }

    # ---- read API ----

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks)

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    @property
    def labels(self) -> list[Label]:
        return list(self._labels)

    def get_task(self, task_id: str) -> Task | None:
        return self._find(task_id)

    def get_project(self, project_id: str) -> Project | None:
        return next((p for p in self._projects if p.id == project_id), None)

    def get_next_task(self) -> Task | None:
        """
        Best incomplete task: highest priority, then earliest due date
        (dated before undated), then lowest manual order.
        """
        incomplete = [t for t in self._tasks if not t.completed]
        if not incomplete:
            return None
        return min(incomplete, key=next_task_key)

    def grouped(self, *, now: datetime | None = None) -> TaskGroups:
        today = (now or self._clock()).date()
        return group_tasks(self._tasks, self.filters, today=today)

    # ---- tasks ----

    def add_task(
        self,
        *,
        title: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
        due_date: datetime | None = None,
        project_id: str | None = INBOX_ID,
        labels: Iterable[str] = (),
        completed: bool = False,
    ) -> Task:
        now = self._clock()
        task = Task(
            id=generate_id(),
            title=title,
            created_at=now,
            updated_at=now,
            order=len(self._tasks),
            description=description,
            completed=completed,
            priority=Priority(priority),
            due_date=to_local_naive(due_date),
            project_id=project_id,
            labels=list(dict.fromkeys(labels)),
        )
        self._tasks.append(task)
        self._commit()
        logger.debug(
            "Task added id=%s priority=%s due=%s project=%s",
            task.id,
            task.priority.value,
            task.due_date,
            task.project_id,
        )
        return task

    def update_task(
        self,
        task_id: str,
        *,
        title: str = _UNSET,
        description: str | None = _UNSET,
        completed: bool = _UNSET,
        priority: Priority = _UNSET,
        due_date: datetime | None = _UNSET,
        project_id: str | None = _UNSET,
        labels: Iterable[str] = _UNSET,
        order: int = _UNSET,
    ) -> None:
        task = self._find(task_id)
        if task is None:
            logger.debug("update_task: unknown id=%s", task_id)
            return

        if title is not _UNSET:
            task.title = title
        if description is not _UNSET:
            task.description = description
        if completed is not _UNSET:
            task.completed = bool(completed)
        if priority is not _UNSET:
            task.priority = Priority(priority)
        if due_date is not _UNSET:
            task.due_date = to_local_naive(due_date)
        if project_id is not _UNSET:
            task.project_id = project_id
        if labels is not _UNSET:
            task.labels = list(dict.fromkeys(labels))
        if order is not _UNSET:
            task.order = int(order)

        task.updated_at = self._clock()
        self._commit()
        logger.debug("Task updated id=%s", task_id)

    def delete_task(self, task_id: str) -> None:
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t.id != task_id]
        if len(self._tasks) == before:
            logger.debug("delete_task: unknown id=%s", task_id)
            return
        self._commit()
        logger.debug("Task deleted id=%s", task_id)

    def toggle_complete(self, task_id: str) -> None:
        task = self._find(task_id)
        if task is None:
            logger.debug("toggle_complete: unknown id=%s", task_id)
            return
        task.completed = not task.completed
        task.updated_at = self._clock()
        self._commit()
        logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)

    def reorder_tasks(self, task_ids: Iterable[str]) -> None:
        """Assign manual order following task_ids; tasks not listed keep their order."""
        changed = False
        for position, task_id in enumerate(task_ids):
            task = self._find(task_id)
            if task is None:
                continue
            task.order = position
            changed = True
        if changed:
            self._commit()

    # ---- projects ----

    def add_project(self, *, name: str, color: str, icon: str | None = None) -> Project:
        project = Project(id=generate_id(), name=name, color=color, created_at=self._clock(), icon=icon)
        self._projects.append(project)
        self._commit()
        logger.debug("Project added id=%s name=%s", project.id, name)
        return project

    def update_project(
        self,
        project_id: str,
        *,
        name: str = _UNSET,
        color: str = _UNSET,
        icon: str | None = _UNSET,
    ) -> None:
        project = self.get_project(project_id)
        if project is None:
            return
        if name is not _UNSET:
            project.name = name
        if color is not _UNSET:
            project.color = color
        if icon is not _UNSET:
            project.icon = icon
        self._commit()

    def delete_project(self, project_id: str) -> None:
        """Remove a project; its tasks move to the inbox."""
        if project_id == INBOX_ID:
            raise ProtectedProjectError("the inbox project cannot be deleted")
        if self.get_project(project_id) is None:
            return

        self._projects = [p for p in self._projects if p.id != project_id]
        moved = 0
        for task in self._tasks:
            if task.project_id == project_id:
                task.project_id = INBOX_ID
                moved += 1
        if self.filters.project == project_id:
            self.filters.project = None
        self._commit()
        logger.debug("Project deleted id=%s moved_tasks=%d", project_id, moved)

    # ---- labels ----

    def add_label(self, *, name: str, color: str) -> Label:
        label = Label(id=generate_id(), name=name, color=color)
        self._labels.append(label)
        self._commit()
        logger.debug("Label added id=%s name=%s", label.id, name)
        return label

    def delete_label(self, label_id: str) -> None:
        """Remove a label and scrub it from every task."""
        self._labels = [lb for lb in self._labels if lb.id != label_id]
        for task in self._tasks:
            if label_id in task.labels:
                task.labels = [x for x in task.labels if x != label_id]
        if self.filters.label == label_id:
            self.filters.label = None
        self._commit()

    # ---- filters ----

    def set_selected_project(self, project_id: str | None) -> None:
        self.filters.project = project_id
        self._commit()

    def set_selected_label(self, label_id: str | None) -> None:
        self.filters.label = label_id
        self._commit()

    def set_search_query(self, query: str) -> None:
        self.filters.search = query
        self._commit()

    def set_show_completed(self, show: bool) -> None:
        self.filters.show_completed = bool(show)
        self._commit()

    # ---- focus mode ----

    def toggle_focus_mode(self) -> bool:
        """
        inactive -> active: pin get_next_task() as the focus target.
        active -> inactive: clear the target.

        Returns the new focus_mode value.
        """
        if not self.focus_mode:
            nxt = self.get_next_task()
            self.focus_mode = True
            self.current_focus_task = nxt.id if nxt else None
        else:
            self.focus_mode = False
            self.current_focus_task = None
        self._commit()
        logger.debug("Focus mode=%s target=%s", self.focus_mode, self.current_focus_task)
        return self.focus_mode

    def set_current_focus_task(self, task_id: str | None) -> None:
        self.current_focus_task = task_id
        self._commit()

    def skip_focus_task(self) -> str | None:
        """Pin the first other incomplete task (collection order); keep the target if none."""
        for task in self._tasks:
            if not task.completed and task.id != self.current_focus_task:
                self.current_focus_task = task.id
                self._commit()
                break
        return self.current_focus_task

    def focus_task(self) -> Task | None:
        if not self.focus_mode or self.current_focus_task is None:
            return None
        return self._find(self.current_focus_task)
