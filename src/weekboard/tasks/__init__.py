"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus)
- task_store.py: SQLite-backed storage with live snapshot subscriptions
- task_watcher.py: polling loop that pushes snapshots for out-of-process writes
- task_api.py: small high-level helpers used by the rest of the app
"""
