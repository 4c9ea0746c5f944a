# src/flowstate/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The stores depend on Protocols instead of concrete implementations.
This keeps the clock and the persistence backend swappable and makes testing easier.
"""

from datetime import datetime
from typing import Any, Protocol

Snapshot = dict[str, Any]
# Full-state record as written to disk: plain JSON-compatible values only.


class Clock(Protocol):
    """Source of "now" in local time. Stores read it once per operation."""

    def __call__(self) -> datetime: ...


class SnapshotRepo(Protocol):
    """
    Opaque key-value slot holding one full-state snapshot.

    load() returns None when nothing was saved yet (or the slot is unreadable);
    save() replaces the previous snapshot entirely.
    """

    def load(self) -> Snapshot | None: ...
    def save(self, snapshot: Snapshot) -> None: ...


def system_clock() -> datetime:
    return datetime.now()
