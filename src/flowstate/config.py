# src/flowstate/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a local default.
- Optional config_local.py for safe per-machine overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .focus.timer import DEFAULT_FOCUS_MINUTES, FOCUS_DURATIONS

ENV_PREFIX = "FLOWSTATE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def normalize_focus_minutes(value: int) -> int:
    return value if value in FOCUS_DURATIONS else DEFAULT_FOCUS_MINUTES


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_snapshot_path: Path
    progress_snapshot_path: Path
    persist: bool

    # ---- Focus mode ----
    focus_minutes: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "flowstate").strip() or "flowstate"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/flowstate"))
        tasks_snapshot_path = _env_path(_k("TASKS_PATH"), data_dir / "tasks.json")
        progress_snapshot_path = _env_path(_k("PROGRESS_PATH"), data_dir / "progress.json")
        persist = _env_bool(_k("PERSIST"), True)

        focus_minutes = normalize_focus_minutes(_env_int(_k("FOCUS_MINUTES"), DEFAULT_FOCUS_MINUTES))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            tasks_snapshot_path=tasks_snapshot_path,
            progress_snapshot_path=progress_snapshot_path,
            persist=persist,
            focus_minutes=focus_minutes,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
try:
    import config_local as _config_local  # type: ignore

    if hasattr(_config_local, "FOCUS_MINUTES"):
        object.__setattr__(  # type: ignore[misc]
            SETTINGS, "focus_minutes", normalize_focus_minutes(int(_config_local.FOCUS_MINUTES))
        )
    if hasattr(_config_local, "PERSIST"):
        object.__setattr__(SETTINGS, "persist", bool(_config_local.PERSIST))  # type: ignore[misc]
except Exception:
    pass


def get_settings() -> Settings:
    return SETTINGS
