# src/flowstate/progress/achievements.py

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum


class AchievementKind(StrEnum):
    TASKS_COMPLETED = "tasks_completed"
    STREAK = "streak"
    FOCUS_SESSIONS = "focus_sessions"
    LEVEL = "level"


@dataclass(frozen=True, slots=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    requirement: int
    kind: AchievementKind


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement("first_task", "First Step", "Complete your first task", "🎯", 1, AchievementKind.TASKS_COMPLETED),
    Achievement("ten_tasks", "Getting Started", "Complete 10 tasks", "⭐", 10, AchievementKind.TASKS_COMPLETED),
    Achievement("fifty_tasks", "Task Master", "Complete 50 tasks", "🏆", 50, AchievementKind.TASKS_COMPLETED),
    Achievement("hundred_tasks", "Centurion", "Complete 100 tasks", "💯", 100, AchievementKind.TASKS_COMPLETED),
    Achievement("streak_3", "On Fire", "3 day streak", "🔥", 3, AchievementKind.STREAK),
    Achievement("streak_7", "Week Warrior", "7 day streak", "⚡", 7, AchievementKind.STREAK),
    Achievement("streak_30", "Unstoppable", "30 day streak", "🌟", 30, AchievementKind.STREAK),
    Achievement("focus_5", "Focused", "Complete 5 focus sessions", "🧘", 5, AchievementKind.FOCUS_SESSIONS),
    Achievement("focus_25", "Deep Work", "Complete 25 focus sessions", "🧠", 25, AchievementKind.FOCUS_SESSIONS),
    Achievement("level_5", "Rising Star", "Reach level 5", "✨", 5, AchievementKind.LEVEL),
    Achievement("level_10", "Pro", "Reach level 10", "💎", 10, AchievementKind.LEVEL),
    Achievement("level_25", "Legend", "Reach level 25", "👑", 25, AchievementKind.LEVEL),
)


def evaluate_achievements(
    totals: Mapping[AchievementKind, int],
    unlocked: Collection[str],
    catalog: Iterable[Achievement] = ACHIEVEMENTS,
) -> list[Achievement]:
    """Return catalog entries not yet unlocked whose running total meets the requirement."""
    return [
        a
        for a in catalog
        if a.id not in unlocked and totals.get(a.kind, 0) >= a.requirement
    ]
