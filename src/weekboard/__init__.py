"""Weekly task board with backlog and rollover of unfinished tasks."""

__version__ = "0.1.0"
