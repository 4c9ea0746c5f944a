# tests/test_grouping.py

from __future__ import annotations

from datetime import datetime

from flowstate.tasks.task_models import INBOX_ID, TODAY_VIEW, Priority
from flowstate.tasks.task_store import TaskStore

from .fakes import FakeClock


def _titles(tasks) -> list[str]:
    return [t.title for t in tasks]


def test_buckets_by_due_date(store: TaskStore) -> None:
    # clock: 2024-05-15 10:30
    store.add_task(title="overdue", due_date=datetime(2024, 5, 14, 23, 59))
    store.add_task(title="today", due_date=datetime(2024, 5, 15))
    store.add_task(title="tomorrow", due_date=datetime(2024, 5, 16))
    store.add_task(title="later", due_date=datetime(2024, 5, 20))
    store.add_task(title="whenever")

    groups = store.grouped()

    assert _titles(groups.overdue) == ["overdue"]
    assert _titles(groups.today) == ["today"]
    assert _titles(groups.tomorrow) == ["tomorrow"]
    assert _titles(groups.upcoming) == ["later"]
    assert _titles(groups.no_due) == ["whenever"]
    assert groups.completed == []
    assert len(groups) == 5


def test_reference_date_is_explicit(store: TaskStore) -> None:
    store.add_task(title="t", due_date=datetime(2024, 5, 16))
    groups = store.grouped(now=datetime(2024, 5, 16, 23, 59))
    assert _titles(groups.today) == ["t"]


def test_buckets_sorted_by_priority_then_order(store: TaskStore) -> None:
    store.add_task(title="b-low", priority=Priority.LOW)
    store.add_task(title="c-med")
    store.add_task(title="d-urgent", priority=Priority.URGENT)
    store.add_task(title="e-med")

    assert _titles(store.grouped().no_due) == ["d-urgent", "c-med", "e-med", "b-low"]


def test_search_matches_title_and_description(store: TaskStore) -> None:
    store.add_task(title="Email Alice")
    store.add_task(title="groceries", description="eggs, ALICE's cake")
    store.add_task(title="gym")

    store.set_search_query("alice")
    assert sorted(_titles(store.grouped().no_due)) == ["Email Alice", "groceries"]


def test_search_query_is_matched_verbatim(store: TaskStore) -> None:
    store.add_task(title="Email Alice")
    store.add_task(title="alice-notes")

    store.set_search_query(" alice")
    assert _titles(store.grouped().no_due) == ["Email Alice"]


def test_project_filters(store: TaskStore) -> None:
    work = store.add_project(name="Work", color="#000")
    store.add_task(title="in inbox")
    store.add_task(title="no project", project_id=None)
    store.add_task(title="work item", project_id=work.id)
    store.add_task(title="work today", project_id=work.id, due_date=datetime(2024, 5, 15))

    store.set_selected_project(INBOX_ID)
    assert sorted(_titles(store.grouped().no_due)) == ["in inbox", "no project"]

    store.set_selected_project(work.id)
    groups = store.grouped()
    assert _titles(groups.no_due) == ["work item"]
    assert _titles(groups.today) == ["work today"]

    store.set_selected_project(TODAY_VIEW)
    groups = store.grouped()
    assert _titles(groups.today) == ["work today"]
    assert len(groups) == 1


def test_label_filter(store: TaskStore) -> None:
    label = store.add_label(name="calls", color="#0f0")
    store.add_task(title="call mom", labels=[label.id])
    store.add_task(title="write")

    store.set_selected_label(label.id)
    assert _titles(store.grouped().no_due) == ["call mom"]


def test_completed_hidden_unless_shown(store: TaskStore, clock: FakeClock) -> None:
    first = store.add_task(title="first")
    second = store.add_task(title="second")
    store.add_task(title="open")
    store.toggle_complete(first.id)
    clock.advance(minutes=1)
    store.toggle_complete(second.id)

    assert store.grouped().completed == []
    assert _titles(store.grouped().no_due) == ["open"]

    store.set_show_completed(True)
    groups = store.grouped()
    assert _titles(groups.completed) == ["second", "first"]
    assert _titles(groups.no_due) == ["open"]
