"""Personal task manager with XP, streaks, achievements and a focus mode."""

__version__ = "0.1.0"
