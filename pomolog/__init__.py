"""Terminal work/break countdown timer with a daily session log."""

__version__ = "1.0.0"
