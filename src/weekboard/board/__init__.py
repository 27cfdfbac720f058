"""
Board engine.

Components:
- week.py: ISO week arithmetic
- organizer.py: snapshot -> backlog / day buckets (with rollover)
- lifecycle.py: status transitions and completion stamping
- history.py: finished-task projection
- reassign.py: gestures -> single store mutations
- view.py: live observer tying the store to the organizer
"""
