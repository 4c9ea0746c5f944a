# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "FLOWSTATE_APP_NAME": "App display name (default: flowstate).",
    "FLOWSTATE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "FLOWSTATE_DATA_DIR": "Local data directory (default: .local/flowstate).",
    "FLOWSTATE_TASKS_PATH": "Task/project/label snapshot (default: <data_dir>/tasks.json).",
    "FLOWSTATE_PROGRESS_PATH": "XP/level/streak snapshot (default: <data_dir>/progress.json).",
    "FLOWSTATE_PERSIST": "Write snapshots to disk (true/false, default: true).",
    # Focus mode
    "FLOWSTATE_FOCUS_MINUTES": "Default focus session length: 15, 25, 45 or 60 (default: 25).",
}
