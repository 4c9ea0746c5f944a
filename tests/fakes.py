# tests/fakes.py

from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any


class FakeClock:
    """
    Deterministic clock for unit tests.

    Stores call it like datetime.now(); tests move time with advance().
    """

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class InMemorySnapshot:
    """
    In-memory SnapshotRepo.

    Snapshots go through a JSON round trip so tests catch values that would not survive disk.
    """

    def __init__(self) -> None:
        self.data: dict[str, Any] | None = None
        self.saves = 0

    def load(self) -> dict[str, Any] | None:
        return json.loads(json.dumps(self.data)) if self.data is not None else None

    def save(self, snapshot: dict[str, Any]) -> None:
        self.data = json.loads(json.dumps(snapshot))
        self.saves += 1
