# src/flowstate/progress/engine.py

"""
Progression engine: XP, levels, daily streaks and achievements.

Level thresholds are cumulative XP totals: reaching level L+1 needs
xp >= floor(100 * L ** 1.5). Every completion also grants a streak bonus of
floor(amount * streak * 0.1).

The calendar day is read from the clock once per call.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from ..core.ports import Clock, Snapshot, SnapshotRepo, system_clock
from .achievements import ACHIEVEMENTS, Achievement, AchievementKind, evaluate_achievements

logger = logging.getLogger(__name__)

XP_PER_TASK = 25
XP_PER_FOCUS_MINUTE = 2
STREAK_BONUS_MULTIPLIER = 0.1


def level_threshold(level: int) -> int:
    """Total XP at which `level` is completed (and level+1 starts)."""
    if level <= 0:
        return 0
    return math.floor(100 * level**1.5)


@dataclass(slots=True)
class ProgressState:
    xp: int = 0
    level: int = 1
    streak: int = 0
    last_completed_date: date | None = None
    tasks_completed_today: int = 0
    total_tasks_completed: int = 0
    focus_sessions_completed: int = 0
    total_focus_minutes: int = 0
    # achievement id -> unlock time; keys are the unlocked set
    unlocked: dict[str, datetime] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "xp": self.xp,
            "level": self.level,
            "streak": self.streak,
            "last_completed_date": self.last_completed_date.isoformat() if self.last_completed_date else None,
            "tasks_completed_today": self.tasks_completed_today,
            "total_tasks_completed": self.total_tasks_completed,
            "focus_sessions_completed": self.focus_sessions_completed,
            "total_focus_minutes": self.total_focus_minutes,
            "unlocked_achievements": {k: v.isoformat() for k, v in self.unlocked.items()},
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> ProgressState:
        last = d.get("last_completed_date")
        unlocked: dict[str, datetime] = {}
        raw_unlocked = d.get("unlocked_achievements") or {}
        if isinstance(raw_unlocked, list):
            # ids only, no timestamps
            raw_unlocked = {str(k): None for k in raw_unlocked}
        elif not isinstance(raw_unlocked, dict):
            raw_unlocked = {}
        for k, v in raw_unlocked.items():
            try:
                unlocked[str(k)] = datetime.fromisoformat(v) if v else datetime.fromtimestamp(0)
            except ValueError:
                unlocked[str(k)] = datetime.fromtimestamp(0)

        return cls(
            xp=max(0, int(d.get("xp") or 0)),
            level=max(1, int(d.get("level") or 1)),
            streak=max(0, int(d.get("streak") or 0)),
            last_completed_date=date.fromisoformat(last) if last else None,
            tasks_completed_today=int(d.get("tasks_completed_today") or 0),
            total_tasks_completed=int(d.get("total_tasks_completed") or 0),
            focus_sessions_completed=int(d.get("focus_sessions_completed") or 0),
            total_focus_minutes=int(d.get("total_focus_minutes") or 0),
            unlocked=unlocked,
        )


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """What a completion call changed; used by the UI for level-up / unlock toasts."""

    xp_gained: int
    level_before: int
    level_after: int
    unlocked: tuple[Achievement, ...] = ()

    @property
    def leveled_up(self) -> bool:
        return self.level_after > self.level_before


class ProgressionEngine:
    """
    Owns ProgressState and applies completion events to it.

    Persistence mirrors TaskStore: optional SnapshotRepo, loaded on init,
    saved after every mutation.
    """

    def __init__(
        self,
        snapshot: SnapshotRepo | None = None,
        *,
        clock: Clock = system_clock,
        catalog: Sequence[Achievement] = ACHIEVEMENTS,
    ) -> None:
        self._snapshot = snapshot
        self._clock = clock
        self.catalog: tuple[Achievement, ...] = tuple(catalog)
        self.state = ProgressState()

        data = snapshot.load() if snapshot is not None else None
        if data:
            try:
                self.state = ProgressState.from_dict(data)
            except (AttributeError, TypeError, ValueError):
                logger.exception("Malformed progress snapshot; starting fresh.")

        logger.info(
            "ProgressionEngine ready level=%d xp=%d streak=%d unlocked=%d",
            self.state.level,
            self.state.xp,
            self.state.streak,
            len(self.state.unlocked),
        )

    def _commit(self) -> None:
        if self._snapshot is not None:
            self._snapshot.save(self.state.to_dict())

    def to_snapshot(self) -> Snapshot:
        return self.state.to_dict()

    # ---- XP / levels ----

    def add_xp(self, amount: int) -> int:
        """Add amount plus the streak bonus; returns the XP actually granted."""
        s = self.state
        bonus = math.floor(amount * s.streak * STREAK_BONUS_MULTIPLIER)
        gained = amount + bonus
        s.xp += gained

        before = s.level
        while s.xp >= level_threshold(s.level):
            s.level += 1
        if s.level > before:
            logger.info("Level up %d -> %d (xp=%d)", before, s.level, s.xp)

        self.check_achievements()
        self._commit()
        return gained

    def xp_for_next_level(self) -> int:
        return level_threshold(self.state.level)

    def level_progress(self) -> float:
        """Fraction of the current level done, clamped to [0, 1]."""
        current = level_threshold(self.state.level - 1)
        nxt = level_threshold(self.state.level)
        span = nxt - current
        if span <= 0:
            return 1.0
        return min(max((self.state.xp - current) / span, 0.0), 1.0)

    # ---- events ----

    def complete_task(self) -> ProgressEvent:
        s = self.state
        today = self._clock().date()
        level_before = s.level
        unlocked_before = set(s.unlocked)

        if s.last_completed_date != today:
            if s.last_completed_date == today - timedelta(days=1):
                s.streak += 1
            else:
                s.streak = 1
            s.tasks_completed_today = 1
            s.last_completed_date = today
        else:
            s.tasks_completed_today += 1

        s.total_tasks_completed += 1
        gained = self.add_xp(XP_PER_TASK)
        self.check_achievements()
        self._commit()
        return self._event(gained, level_before, unlocked_before)

    def complete_focus_session(self, minutes: int) -> ProgressEvent:
        s = self.state
        level_before = s.level
        unlocked_before = set(s.unlocked)

        s.focus_sessions_completed += 1
        s.total_focus_minutes += minutes
        gained = self.add_xp(minutes * XP_PER_FOCUS_MINUTE)
        self.check_achievements()
        self._commit()
        logger.info("Focus session done minutes=%d xp=+%d", minutes, gained)
        return self._event(gained, level_before, unlocked_before)

    def check_streak(self) -> None:
        """Break the streak if the last completion was before yesterday. Idempotent."""
        s = self.state
        if s.last_completed_date is None:
            return
        today = self._clock().date()
        if s.last_completed_date in (today, today - timedelta(days=1)):
            return
        if s.streak != 0:
            logger.info("Streak broken (last completion %s)", s.last_completed_date)
            s.streak = 0
            self._commit()

    def check_achievements(self) -> list[Achievement]:
        s = self.state
        totals = {
            AchievementKind.TASKS_COMPLETED: s.total_tasks_completed,
            AchievementKind.STREAK: s.streak,
            AchievementKind.FOCUS_SESSIONS: s.focus_sessions_completed,
            AchievementKind.LEVEL: s.level,
        }
        new = evaluate_achievements(totals, s.unlocked.keys(), self.catalog)
        if not new:
            return []

        now = self._clock()
        for a in new:
            s.unlocked[a.id] = now
            logger.info("Achievement unlocked: %s (%s)", a.id, a.name)
        self._commit()
        return new

    def _event(self, gained: int, level_before: int, unlocked_before: set[str]) -> ProgressEvent:
        fresh = tuple(a for a in self.catalog if a.id in self.state.unlocked and a.id not in unlocked_before)
        return ProgressEvent(
            xp_gained=gained,
            level_before=level_before,
            level_after=self.state.level,
            unlocked=fresh,
        )

    # ---- read API ----

    @property
    def unlocked_ids(self) -> frozenset[str]:
        return frozenset(self.state.unlocked)

    def unlocked(self) -> list[tuple[Achievement, datetime]]:
        return [(a, self.state.unlocked[a.id]) for a in self.catalog if a.id in self.state.unlocked]

    def stats(self) -> dict[str, Any]:
        s = self.state
        return {
            "level": s.level,
            "xp": s.xp,
            "xp_for_next_level": self.xp_for_next_level(),
            "level_progress": self.level_progress(),
            "streak": s.streak,
            "tasks_completed_today": s.tasks_completed_today,
            "total_tasks_completed": s.total_tasks_completed,
            "focus_sessions_completed": s.focus_sessions_completed,
            "total_focus_minutes": s.total_focus_minutes,
            "achievements_unlocked": len(s.unlocked),
            "achievements_total": len(self.catalog),
        }
