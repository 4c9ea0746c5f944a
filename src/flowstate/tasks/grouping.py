# src/flowstate/tasks/grouping.py

"""
Filtering and due-date bucketing for task lists.

The view layer renders whatever group_tasks() returns; the rules live here:
- search (case-insensitive substring of title or description),
- then project filter (incl. "today" / "inbox" pseudo-views),
- then label filter,
- then completed visibility.

Buckets use a single reference date taken once per query.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from .task_models import (
    INBOX_ID,
    TODAY_VIEW,
    Task,
    TaskFilters,
    TaskGroups,
    priority_order_key,
)


def _matches_search(task: Task, query: str) -> bool:
    return query in task.title.lower() or query in (task.description or "").lower()


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters, *, today: date) -> list[Task]:
    out = list(tasks)

    query = filters.search.lower()
    if query:
        out = [t for t in out if _matches_search(t, query)]

    project = filters.project
    if project == TODAY_VIEW:
        out = [t for t in out if t.due_date is not None and t.due_date.date() == today]
    elif project == INBOX_ID:
        out = [t for t in out if not t.project_id or t.project_id == INBOX_ID]
    elif project:
        out = [t for t in out if t.project_id == project]

    if filters.label:
        out = [t for t in out if filters.label in t.labels]

    if not filters.show_completed:
        out = [t for t in out if not t.completed]

    return out


def group_tasks(tasks: Iterable[Task], filters: TaskFilters, *, today: date) -> TaskGroups:
    groups = TaskGroups()
    tomorrow = today + timedelta(days=1)

    for task in filter_tasks(tasks, filters, today=today):
        if task.completed:
            groups.completed.append(task)
            continue

        if task.due_date is None:
            groups.no_due.append(task)
            continue

        due = task.due_date.date()
        if due < today:
            groups.overdue.append(task)
        elif due == today:
            groups.today.append(task)
        elif due == tomorrow:
            groups.tomorrow.append(task)
        else:
            groups.upcoming.append(task)

    for bucket in (groups.overdue, groups.today, groups.tomorrow, groups.upcoming, groups.no_due):
        bucket.sort(key=priority_order_key)
    groups.completed.sort(key=lambda t: t.updated_at, reverse=True)
    return groups
