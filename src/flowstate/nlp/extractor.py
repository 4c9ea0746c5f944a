# src/flowstate/nlp/extractor.py

"""Quick-add parsing: pull a due date and a priority marker out of free text.

    "Call mom tomorrow !high"   -> title "Call mom", due tomorrow, high
    "ship release !!"           -> title "ship release", urgent
    "renew passport in 5 days"  -> title "renew passport", due today + 5

Never fails: no match means medium priority, no due date, the text as title.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..tasks.task_models import Priority

# Checked in order; the first marker present wins and all its occurrences are removed.
_PRIORITY_MARKERS: list[tuple[Priority, re.Pattern[str]]] = [
    (Priority.URGENT, re.compile(r"!urgent|!!")),
    (Priority.HIGH, re.compile(r"!high|!h")),
    (Priority.LOW, re.compile(r"!low|!l")),
]

_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

# Tried in order; extraction stops at the first pattern that matches.
_DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(today|tomorrow|next week)\b", re.IGNORECASE),
    re.compile(r"\b(next )?(" + "|".join(_WEEKDAYS) + r")\b", re.IGNORECASE),
    re.compile(r"\bin (\d+) days?\b", re.IGNORECASE),
]

_IN_DAYS = re.compile(r"in (\d+) days?")
_WS = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class ExtractedTask:
    title: str
    due_date: datetime | None
    priority: Priority


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def parse_natural_date(phrase: str, *, today: date | None = None) -> datetime | None:
    """Resolve a date phrase to local midnight of the target day, or None."""
    today = today or date.today()
    text = phrase.lower()

    if "today" in text:
        return _midnight(today)
    if "tomorrow" in text:
        return _midnight(today + timedelta(days=1))
    if "next week" in text:
        return _midnight(today + timedelta(days=7))

    for index, name in enumerate(_WEEKDAYS):
        if name in text:
            days_until = index - today.weekday()
            if days_until <= 0:
                days_until += 7
            if "next" in text:
                days_until += 7
            return _midnight(today + timedelta(days=days_until))

    m = _IN_DAYS.search(text)
    if m:
        try:
            return _midnight(today + timedelta(days=int(m.group(1))))
        except OverflowError:
            # past date.max: no usable date
            return None

    return None


def extract(text: str, *, today: date | None = None) -> ExtractedTask:
    today = today or date.today()
    title = text
    priority = Priority.MEDIUM

    for candidate, pattern in _PRIORITY_MARKERS:
        if pattern.search(text):
            priority = candidate
            title = pattern.sub("", title)
            break

    due_date: datetime | None = None
    for pattern in _DATE_PATTERNS:
        m = pattern.search(title)
        if m:
            due_date = parse_natural_date(m.group(0), today=today)
            if due_date is not None:
                title = title[: m.start()] + title[m.end() :]
            break

    title = _WS.sub(" ", title).strip()
    return ExtractedTask(title=title, due_date=due_date, priority=priority)
