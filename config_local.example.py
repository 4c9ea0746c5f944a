# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for everything else. This file should contain only safe overrides.
"""

# Example: longer default focus sessions
# FOCUS_MINUTES = 45

# Example: keep everything in memory (handy for demos)
# PERSIST = False
