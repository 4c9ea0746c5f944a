# tests/test_snapshot.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from flowstate.progress.engine import ProgressionEngine
from flowstate.storage.snapshot import JsonSnapshotFile
from flowstate.tasks.task_models import Priority
from flowstate.tasks.task_store import TaskStore

from .fakes import FakeClock


def test_missing_file_loads_nothing(tmp_path: Path) -> None:
    assert JsonSnapshotFile(tmp_path / "nope.json").load() is None


def test_malformed_file_loads_nothing(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{not json", "utf-8")
    assert JsonSnapshotFile(path).load() is None

    path.write_text("[1, 2, 3]", "utf-8")
    assert JsonSnapshotFile(path).load() is None


def test_save_replaces_file_atomically(tmp_path: Path) -> None:
    snap = JsonSnapshotFile(tmp_path / "sub" / "tasks.json")
    snap.save({"tasks": [], "n": 1})
    snap.save({"tasks": [], "n": 2})
    assert snap.load() == {"tasks": [], "n": 2}
    assert not (tmp_path / "sub" / "tasks.tmp").exists()


def test_stores_survive_restart(tmp_path: Path, clock: FakeClock) -> None:
    tasks_file = JsonSnapshotFile(tmp_path / "tasks.json")
    progress_file = JsonSnapshotFile(tmp_path / "progress.json")

    store = TaskStore(tasks_file, clock=clock)
    task = store.add_task(title="file taxes", priority=Priority.URGENT, due_date=datetime(2024, 5, 17))
    engine = ProgressionEngine(progress_file, clock=clock)
    engine.complete_task()

    store2 = TaskStore(JsonSnapshotFile(tmp_path / "tasks.json"), clock=clock)
    engine2 = ProgressionEngine(JsonSnapshotFile(tmp_path / "progress.json"), clock=clock)

    again = store2.get_task(task.id)
    assert again is not None
    assert again.priority is Priority.URGENT
    assert again.due_date == datetime(2024, 5, 17)
    assert engine2.state.xp == engine.state.xp
    assert engine2.state.streak == 1
    assert "first_task" in engine2.unlocked_ids


def test_unknown_priority_falls_back_to_medium(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        '{"tasks": [{"id": "abc", "title": "old", "priority": "someday", "order": 0}]}',
        "utf-8",
    )
    store = TaskStore(JsonSnapshotFile(path), clock=clock)
    task = store.get_task("abc")
    assert task is not None
    assert task.priority is Priority.MEDIUM
    assert task.labels == []
    assert store.get_project("inbox") is not None


def test_wrongly_shaped_collections_are_skipped(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        '{"tasks": ["oops", 7, {"id": "abc", "title": "kept", "order": 0}],'
        ' "projects": "nope", "labels": [1, null, {"id": "l1", "name": "home", "color": "#fff"}]}',
        "utf-8",
    )
    store = TaskStore(JsonSnapshotFile(path), clock=clock)

    assert [t.id for t in store.tasks] == ["abc"]
    assert [p.id for p in store.projects] == ["inbox"]
    assert [lb.id for lb in store.labels] == ["l1"]


def test_non_list_tasks_field_loads_empty_store(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "tasks.json"
    path.write_text('{"tasks": {"id": "abc"}}', "utf-8")
    store = TaskStore(JsonSnapshotFile(path), clock=clock)
    assert store.tasks == []
    assert store.get_project("inbox") is not None
