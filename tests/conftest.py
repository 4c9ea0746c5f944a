# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from flowstate.core.state import AppState
from flowstate.progress.engine import ProgressionEngine
from flowstate.tasks.task_store import TaskStore

from .fakes import FakeClock

# A Wednesday, mid-morning.
NOW = datetime(2024, 5, 15, 10, 30)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def store(clock: FakeClock) -> TaskStore:
    return TaskStore(clock=clock)


@pytest.fixture()
def progress(clock: FakeClock) -> ProgressionEngine:
    return ProgressionEngine(clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="flowstate-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_snapshot_path=tmp_path / "tasks.json",
        progress_snapshot_path=tmp_path / "progress.json",
        persist=True,
        focus_minutes=25,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, progress: ProgressionEngine) -> AppState:
    """AppState wired with in-memory stores sharing the fake clock."""
    return AppState(settings=settings, tasks=store, progress=progress, focus_minutes=25)
