# src/flowstate/focus/timer.py

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Session lengths offered by the focus view (minutes).
FOCUS_DURATIONS = (15, 25, 45, 60)
DEFAULT_FOCUS_MINUTES = 25


class FocusTimer:
    """
    Focus-session countdown.

    The timer owns no thread: whoever drives the UI calls tick() once per
    second while it is running. Reaching zero calls on_complete(minutes)
    exactly once and stops the timer; reset() re-arms it.
    """

    def __init__(self, minutes: int = DEFAULT_FOCUS_MINUTES, on_complete: Callable[[int], object] | None = None) -> None:
        if minutes not in FOCUS_DURATIONS:
            raise ValueError(f"Unsupported focus length {minutes}; choose one of {FOCUS_DURATIONS}")
        self.minutes = minutes
        self._on_complete = on_complete
        self.remaining_seconds = minutes * 60
        self.running = False
        self.finished = False

    @property
    def total_seconds(self) -> int:
        return self.minutes * 60

    @property
    def progress(self) -> float:
        return 1 - self.remaining_seconds / self.total_seconds

    def start(self) -> None:
        if not self.finished:
            self.running = True

    def pause(self) -> None:
        self.running = False

    def reset(self, minutes: int | None = None) -> None:
        if minutes is not None:
            if minutes not in FOCUS_DURATIONS:
                raise ValueError(f"Unsupported focus length {minutes}; choose one of {FOCUS_DURATIONS}")
            self.minutes = minutes
        self.remaining_seconds = self.total_seconds
        self.running = False
        self.finished = False

    def tick(self, seconds: int = 1) -> bool:
        """Advance the countdown. Returns True on the tick that finishes the session."""
        if not self.running or self.finished:
            return False
        self.remaining_seconds = max(0, self.remaining_seconds - seconds)
        if self.remaining_seconds > 0:
            return False

        self.running = False
        self.finished = True
        logger.debug("Focus timer finished minutes=%d", self.minutes)
        if self._on_complete is not None:
            self._on_complete(self.minutes)
        return True

    def format_remaining(self) -> str:
        mins, secs = divmod(self.remaining_seconds, 60)
        return f"{mins:02d}:{secs:02d}"
