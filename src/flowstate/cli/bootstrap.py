# src/flowstate/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the snapshot files into the two stores,
- runs the once-per-session streak check.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Clock, system_clock
from ..core.state import AppState
from ..progress.engine import ProgressionEngine
from ..storage.snapshot import JsonSnapshotFile
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_snapshot_path.parent.mkdir(parents=True, exist_ok=True)
    settings.progress_snapshot_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, clock: Clock = system_clock) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    tasks_snapshot = None
    progress_snapshot = None
    if settings.persist:
        _ensure_local_dirs(settings)
        tasks_snapshot = JsonSnapshotFile(settings.tasks_snapshot_path)
        progress_snapshot = JsonSnapshotFile(settings.progress_snapshot_path)
    else:
        logger.info("Persistence disabled; state lives in memory only.")

    progress = ProgressionEngine(progress_snapshot, clock=clock)
    progress.check_streak()

    return AppState(
        settings=settings,
        tasks=TaskStore(tasks_snapshot, clock=clock),
        progress=progress,
        focus_minutes=settings.focus_minutes,
    )
