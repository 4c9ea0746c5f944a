# tests/test_progression.py

from __future__ import annotations

from datetime import date

import pytest

from flowstate.progress.achievements import ACHIEVEMENTS, AchievementKind, evaluate_achievements
from flowstate.progress.engine import ProgressionEngine, level_threshold

from .fakes import FakeClock, InMemorySnapshot


def test_level_thresholds() -> None:
    assert level_threshold(0) == 0
    assert level_threshold(1) == 100
    assert level_threshold(2) == 282
    assert level_threshold(4) == 800


def test_first_completion_starts_streak(progress: ProgressionEngine, clock: FakeClock) -> None:
    event = progress.complete_task()
    s = progress.state

    assert s.streak == 1
    assert s.tasks_completed_today == 1
    assert s.total_tasks_completed == 1
    assert s.last_completed_date == clock.now.date()
    # 25 base + floor(25 * 1 * 0.1) streak bonus
    assert s.xp == 27
    assert event.xp_gained == 27
    assert [a.id for a in event.unlocked] == ["first_task"]


def test_same_day_completions_leave_streak_alone(progress: ProgressionEngine) -> None:
    progress.complete_task()
    progress.complete_task()
    s = progress.state
    assert s.streak == 1
    assert s.tasks_completed_today == 2
    assert s.total_tasks_completed == 2


def test_consecutive_days_extend_streak(progress: ProgressionEngine, clock: FakeClock) -> None:
    progress.complete_task()
    clock.advance(days=1)
    progress.complete_task()
    assert progress.state.streak == 2
    assert progress.state.tasks_completed_today == 1

    clock.advance(days=1)
    event = progress.complete_task()
    assert progress.state.streak == 3
    assert "streak_3" in {a.id for a in event.unlocked}


def test_gap_resets_streak_to_one(progress: ProgressionEngine, clock: FakeClock) -> None:
    progress.complete_task()
    clock.advance(days=1)
    progress.complete_task()
    clock.advance(days=2)
    progress.complete_task()
    assert progress.state.streak == 1


def test_check_streak(progress: ProgressionEngine, clock: FakeClock) -> None:
    progress.check_streak()
    assert progress.state.streak == 0

    progress.complete_task()
    clock.advance(days=1)
    progress.check_streak()
    assert progress.state.streak == 1

    clock.advance(days=1)
    xp_before = progress.state.xp
    progress.check_streak()
    progress.check_streak()
    assert progress.state.streak == 0
    assert progress.state.tasks_completed_today == 1
    assert progress.state.xp == xp_before


def test_add_xp_levels_up(progress: ProgressionEngine) -> None:
    progress.add_xp(100)
    assert progress.state.level == 2
    assert progress.xp_for_next_level() == 282


def test_large_award_jumps_multiple_levels(progress: ProgressionEngine) -> None:
    progress.add_xp(10_000)
    level = progress.state.level
    assert level > 10
    assert level_threshold(level - 1) <= progress.state.xp < level_threshold(level)
    assert {"level_5", "level_10"} <= progress.unlocked_ids
    assert "level_25" not in progress.unlocked_ids


def test_streak_bonus_applies_to_awards(progress: ProgressionEngine) -> None:
    progress.state.streak = 4
    assert progress.add_xp(50) == 70


def test_level_progress_is_clamped(progress: ProgressionEngine) -> None:
    assert progress.level_progress() == 0.0
    progress.add_xp(50)
    assert progress.level_progress() == pytest.approx(0.5)
    progress.add_xp(50)
    assert progress.state.level == 2
    assert progress.level_progress() == 0.0

    progress.state.xp = 10**6  # out of step with level on purpose
    assert progress.level_progress() == 1.0


def test_focus_session_awards_xp(progress: ProgressionEngine) -> None:
    event = progress.complete_focus_session(25)
    s = progress.state
    assert s.focus_sessions_completed == 1
    assert s.total_focus_minutes == 25
    assert s.xp == 50
    assert event.xp_gained == 50
    assert s.tasks_completed_today == 0

    for _ in range(4):
        progress.complete_focus_session(15)
    assert "focus_5" in progress.unlocked_ids


def test_unlocks_are_never_revoked(progress: ProgressionEngine, clock: FakeClock) -> None:
    for _ in range(3):
        progress.complete_task()
        clock.advance(days=1)
    assert "streak_3" in progress.unlocked_ids

    clock.advance(days=5)
    progress.check_streak()
    progress.check_achievements()
    assert progress.state.streak == 0
    assert "streak_3" in progress.unlocked_ids


def test_event_reports_level_up(progress: ProgressionEngine) -> None:
    progress.state.xp = 90
    event = progress.complete_task()
    assert event.leveled_up
    assert (event.level_before, event.level_after) == (1, 2)


def test_evaluate_achievements_is_pure() -> None:
    totals = {AchievementKind.TASKS_COMPLETED: 10, AchievementKind.LEVEL: 5}
    unlocked = {"first_task"}

    result = evaluate_achievements(totals, unlocked, ACHIEVEMENTS)

    assert [a.id for a in result] == ["ten_tasks", "level_5"]
    assert unlocked == {"first_task"}
    assert len(ACHIEVEMENTS) == 12


def test_progress_snapshot_round_trip(clock: FakeClock) -> None:
    snap = InMemorySnapshot()
    engine = ProgressionEngine(snap, clock=clock)
    engine.complete_task()
    engine.complete_focus_session(45)

    reloaded = ProgressionEngine(snap, clock=clock)
    assert reloaded.state == engine.state
    assert reloaded.state.last_completed_date == date(2024, 5, 15)
    assert [a.id for a, _ in reloaded.unlocked()] == ["first_task"]
