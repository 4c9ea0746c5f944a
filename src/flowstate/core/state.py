# src/flowstate/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..focus.timer import DEFAULT_FOCUS_MINUTES, FocusTimer
from ..progress.engine import ProgressionEngine
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules.
    settings: object

    tasks: TaskStore
    progress: ProgressionEngine

    focus_minutes: int = DEFAULT_FOCUS_MINUTES

    # Running focus countdown and the monotonic time it was last advanced to.
    timer: FocusTimer | None = None
    timer_last_tick: float | None = None

    # Task ids in the order the last /list printed them (for "/done 3").
    last_listing: list[str] = field(default_factory=list)
