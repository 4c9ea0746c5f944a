# tests/test_focus_timer.py

from __future__ import annotations

import pytest

from flowstate.focus.timer import FocusTimer


def test_countdown_completes_once() -> None:
    done: list[int] = []
    timer = FocusTimer(15, on_complete=done.append)
    timer.start()

    assert timer.tick(60) is False
    assert timer.remaining_seconds == 14 * 60
    assert timer.format_remaining() == "14:00"

    assert timer.tick(14 * 60 + 30) is True
    assert timer.remaining_seconds == 0
    assert timer.finished and not timer.running
    assert timer.tick() is False
    assert done == [15]


def test_paused_timer_does_not_move() -> None:
    timer = FocusTimer(25)
    timer.tick(10)
    assert timer.remaining_seconds == 25 * 60

    timer.start()
    timer.tick(30)
    timer.pause()
    timer.tick(30)
    assert timer.remaining_seconds == 25 * 60 - 30
    assert timer.progress == pytest.approx(30 / 1500)


def test_reset_rearms() -> None:
    done: list[int] = []
    timer = FocusTimer(15, on_complete=done.append)
    timer.start()
    timer.tick(15 * 60)
    timer.reset(45)
    assert timer.remaining_seconds == 45 * 60
    assert not timer.finished
    timer.start()
    timer.tick(45 * 60)
    assert done == [15, 45]


def test_rejects_unknown_lengths() -> None:
    with pytest.raises(ValueError):
        FocusTimer(20)
    with pytest.raises(ValueError):
        FocusTimer(25).reset(90)
