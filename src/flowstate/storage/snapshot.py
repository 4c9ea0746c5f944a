# src/flowstate/storage/snapshot.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

from ..core.ports import Snapshot

logger = logging.getLogger(__name__)


class JsonSnapshotFile:
    """
    One JSON file holding one store snapshot.

    Writes go to a sibling .tmp file and are swapped in with os.replace,
    so a crash mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Snapshot | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to load snapshot from %s", self._path)
            return None
        if not isinstance(data, dict):
            logger.warning("Snapshot %s is not an object; ignoring it.", self._path)
            return None
        logger.info("Loaded snapshot %s", self._path)
        return data

    def save(self, snapshot: Snapshot) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self._path.with_suffix(".tmp")
            tmp.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
            with contextlib.suppress(Exception):
                os.chmod(self._path, 0o600)
            logger.debug("Saved snapshot %s", self._path)
        except Exception:
            logger.exception("Failed to save snapshot to %s", self._path)
