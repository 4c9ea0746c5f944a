# src/flowstate/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import date

from ..nlp.extractor import extract
from ..progress.engine import ProgressEvent, ProgressionEngine
from .task_models import INBOX_ID, Task
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def quick_add(
    store: TaskStore,
    text: str,
    *,
    project_id: str | None = INBOX_ID,
    today: date | None = None,
) -> Task | None:
    """
    Convenience helper: parse free text ("pay rent friday !h") and add the task.
    Returns None when nothing is left for a title.
    """
    parsed = extract(text, today=today)
    if not parsed.title:
        logger.debug("quick_add: empty title after extraction input=%r", text)
        return None
    return store.add_task(
        title=parsed.title,
        priority=parsed.priority,
        due_date=parsed.due_date,
        project_id=project_id,
    )


def complete_task(store: TaskStore, progress: ProgressionEngine, task_id: str) -> ProgressEvent | None:
    """
    Toggle completion and award progress for it.

    Only an incomplete -> complete transition is rewarded; toggling a completed
    task reopens it and returns None. If the task was the pinned focus target,
    the next task is pinned.
    """
    task = store.get_task(task_id)
    if task is None:
        return None

    was_completed = task.completed
    store.toggle_complete(task_id)
    if was_completed:
        return None

    event = progress.complete_task()
    if store.focus_mode and store.current_focus_task == task_id:
        nxt = store.get_next_task()
        store.set_current_focus_task(nxt.id if nxt else None)
    return event


def finish_focus_session(progress: ProgressionEngine, minutes: int) -> ProgressEvent:
    return progress.complete_focus_session(minutes)
