# src/weekboard/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import threading
import time
from collections.abc import Iterable, Iterator
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import TaskNotFoundError, TransientStoreFailure, ValidationFailure
from ..core.ports import SnapshotListener
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

# Columns a caller may write through update_task(); everything else is store-owned.
_MUTABLE_FIELDS = frozenset(
    {"title", "kind", "status", "notes", "assigned_date", "completion_date", "assignees"}
)


class StoreSubscription:
    """Handle returned by TaskStore.subscribe(); owned by the view that created it."""

    def __init__(self, store: TaskStore, owner_id: str, listener: SnapshotListener) -> None:
        self._store = store
        self.owner_id = owner_id
        self.listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._store._remove_subscription(self)


class TaskStore:
    """
    SQLite task store with live snapshots.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Snapshots:
    - subscribe() delivers the owner's full task list right away
      and again after every mutation made through this store
    - refresh_if_changed() detects writes made by other processes
      (see task_watcher.py) and pushes them the same way

    Thread-safety:
    - each method opens its own SQLite connection
    - subscriber bookkeeping is guarded by a lock
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._subs: list[StoreSubscription] = []
        self._subs_lock = threading.RLock()
        self._ensure_schema()
        self._signature = self._read_signature()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self._signature[0])

    def close(self) -> None:
        """Drop all subscriptions (no persistent connections to close)."""
        with self._subs_lock:
            subs = list(self._subs)
        for sub in subs:
            sub.unsubscribe()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Open a short-lived connection; backend errors become TransientStoreFailure."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise TransientStoreFailure(f"cannot open {self._db_path}: {e}") from e
        try:
            yield conn
        except sqlite3.DatabaseError as e:
            # Locked, unreadable or corrupted database file.
            raise TransientStoreFailure(str(e)) from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    owner_id TEXT NOT NULL DEFAULT '',
                    title TEXT NOT NULL,
                    kind TEXT NOT NULL DEFAULT '',
                    status TEXT NOT NULL DEFAULT 'NotStarted',
                    notes TEXT,
                    assigned_date TEXT,
                    completion_date TEXT,
                    assignees TEXT NOT NULL DEFAULT '[]',
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("owner_id", "TEXT NOT NULL DEFAULT ''")
            add_col("kind", "TEXT NOT NULL DEFAULT ''")
            add_col("status", "TEXT NOT NULL DEFAULT 'NotStarted'")
            add_col("notes", "TEXT")
            add_col("assigned_date", "TEXT")
            add_col("completion_date", "TEXT")
            add_col("assignees", "TEXT NOT NULL DEFAULT '[]'")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_owner ON tasks(owner_id, created_at)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_tasks_owner_status ON tasks(owner_id, status)"
            )

            conn.commit()

    @staticmethod
    def _assignees_to_str(assignees: Iterable[str] | None) -> str:
        return json.dumps(normalize_assignees(assignees), ensure_ascii=False)

    @staticmethod
    def _str_to_assignees(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            return []
        return [str(v) for v in val] if isinstance(val, list) else []

    @staticmethod
    def _str_to_date(s: str | None) -> date | None:
        if not s:
            return None
        try:
            return date.fromisoformat(s)
        except ValueError:
            logger.warning("Ignoring malformed stored date %r", s)
            return None

    @staticmethod
    def _date_to_str(d: date | None) -> str | None:
        return d.isoformat() if d is not None else None

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            owner_id=str(row["owner_id"] or ""),
            title=str(row["title"] or ""),
            kind=str(row["kind"] or ""),
            status=TaskStatus.from_db(row["status"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
            notes=row["notes"],
            assigned_date=self._str_to_date(row["assigned_date"]),
            completion_date=self._str_to_date(row["completion_date"]),
            assignees=self._str_to_assignees(row["assignees"]),
        )

    def _encode_field(self, name: str, value: Any) -> Any:
        if name == "title":
            title = (value or "").strip()
            if not title:
                raise ValidationFailure("title must not be empty")
            return title
        if name == "kind":
            return (value or "").strip()
        if name == "status":
            return TaskStatus(value).value
        if name == "notes":
            return value if value else None
        if name in ("assigned_date", "completion_date"):
            return self._date_to_str(value)
        if name == "assignees":
            return self._assignees_to_str(value)
        raise TypeError(f"unknown task field: {name}")

    # ---- snapshots ----

    def subscribe(self, owner_id: str, listener: SnapshotListener) -> StoreSubscription:
        """
        Register a snapshot listener for one owner.

        The current snapshot is delivered synchronously before returning
        (or on the next successful refresh if the database is unavailable).
        """
        sub = StoreSubscription(self, owner_id, listener)
        with self._subs_lock:
            self._subs.append(sub)
        logger.debug("Subscribed owner=%s listeners=%d", owner_id, len(self._subs))
        try:
            snapshot = self.list_tasks(owner_id)
        except TransientStoreFailure:
            logger.warning("Initial snapshot unavailable owner=%s", owner_id, exc_info=True)
            with self._subs_lock:
                self._signature = (-1, 0.0, -1)
            return sub
        self._deliver(sub, snapshot)
        return sub

    def _remove_subscription(self, sub: StoreSubscription) -> None:
        with self._subs_lock:
            with contextlib.suppress(ValueError):
                self._subs.remove(sub)
        logger.debug("Unsubscribed owner=%s", sub.owner_id)

    def _deliver(self, sub: StoreSubscription, snapshot: list[Task]) -> None:
        if not sub.active:
            return
        try:
            sub.listener(snapshot)
        except Exception:
            logger.exception("Snapshot listener failed owner=%s", sub.owner_id)

    def _notify(self, owner_ids: Iterable[str] | None = None) -> None:
        """
        Push fresh snapshots to subscribers (of the given owners, or all).

        Runs after a committed write, so a read failure here is only logged:
        the watcher re-delivers once the database is readable again.
        """
        wanted = set(owner_ids) if owner_ids is not None else None
        try:
            with self._subs_lock:
                subs = [s for s in self._subs if s.active]
                self._signature = self._read_signature()

            snapshots: dict[str, list[Task]] = {}
            for sub in subs:
                if wanted is not None and sub.owner_id not in wanted:
                    continue
                if sub.owner_id not in snapshots:
                    snapshots[sub.owner_id] = self.list_tasks(sub.owner_id)
                self._deliver(sub, snapshots[sub.owner_id])
        except TransientStoreFailure:
            logger.warning("Snapshot delivery failed; will retry on refresh", exc_info=True)
            with self._subs_lock:
                self._signature = (-1, 0.0, -1)

    def _read_signature(self) -> tuple[int, float, int]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*), COALESCE(MAX(updated_at), 0), COALESCE(MAX(id), 0) FROM tasks"
            ).fetchone()
            return int(row[0]), float(row[1]), int(row[2])

    def refresh_if_changed(self) -> bool:
        """
        Compare the table signature with the last one seen and, if it moved
        (a write from another process), push snapshots to every subscriber.
        """
        current = self._read_signature()
        with self._subs_lock:
            if current == self._signature:
                return False
        logger.debug("External change detected signature=%s", current)
        self._notify()
        return True

    # ---- queries ----

    def count_tasks(self) -> int:
        with self._connection() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def list_tasks(self, owner_id: str) -> list[Task]:
        """Full snapshot for one owner, in insertion order."""
        with self._connection() as conn:
            cur = conn.execute(
                "SELECT * FROM tasks WHERE owner_id = ? ORDER BY created_at ASC, id ASC",
                (owner_id,),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]

    def get_task(self, task_id: int) -> Task | None:
        """Return the task or None if it was deleted (dangling references resolve to no task)."""
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def list_history(self, owner_id: str) -> list[Task]:
        """Finished (Completed / Cancelled) tasks of one owner; callers re-sort."""
        with self._connection() as conn:
            cur = conn.execute(
                """
                SELECT *
                FROM tasks
                WHERE owner_id = ?
                  AND status IN (?, ?)
                ORDER BY created_at ASC, id ASC
                """,
                (owner_id, TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]

    # ---- mutations ----

    @staticmethod
    def _id_clause(task_id: int, owner_id: str | None) -> tuple[str, list[Any]]:
        if owner_id is None:
            return "id = ?", [int(task_id)]
        return "id = ? AND owner_id = ?", [int(task_id), owner_id]

    def create_task(
        self,
        *,
        owner_id: str,
        title: str,
        kind: str = "",
        notes: str | None = None,
        assigned_date: date | None = None,
        assignees: Iterable[str] | None = None,
    ) -> int:
        """Insert a new task. It always starts NotStarted without a completion date."""
        title = (title or "").strip()
        if not title:
            raise ValidationFailure("title must not be empty")

        now = time.time()
        with self._connection() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(
                    owner_id, title, kind, status, notes,
                    assigned_date, completion_date, assignees,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, NULL, ?, ?, ?)
                """,
                (
                    owner_id,
                    title,
                    (kind or "").strip(),
                    TaskStatus.NOT_STARTED.value,
                    notes or None,
                    self._date_to_str(assigned_date),
                    self._assignees_to_str(assignees),
                    now,
                    now,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)

        logger.debug("Task added id=%s owner=%s assigned_date=%s", task_id, owner_id, assigned_date)
        self._notify([owner_id])
        return task_id

    def update_task(self, task_id: int, *, owner_id: str | None = None, **fields: Any) -> None:
        """
        Partial update: only the given fields are written, an explicit None clears
        a nullable column. Status and completion_date must travel together, and
        completion_date is set exactly when the status is Completed or Cancelled.

        With owner_id, a task of another owner is treated as missing.
        Raises TaskNotFoundError if the id is gone.
        """
        if not fields:
            return
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise TypeError(f"unknown task field(s): {', '.join(sorted(unknown))}")
        if ("status" in fields) != ("completion_date" in fields):
            raise ValidationFailure("status and completion_date must be written in one update")
        if "status" in fields:
            finished = TaskStatus(fields["status"]).is_finished
            if finished != (fields["completion_date"] is not None):
                raise ValidationFailure(
                    "completion_date must be set exactly when the status is Completed or Cancelled"
                )

        sets: list[str] = []
        params: list[Any] = []
        for name in sorted(fields):
            sets.append(f"{name} = ?")
            params.append(self._encode_field(name, fields[name]))

        sets.append("updated_at = MAX(updated_at, ?)")
        params.append(time.time())
        where, where_params = self._id_clause(task_id, owner_id)
        params.extend(where_params)

        sql = f"UPDATE tasks SET {', '.join(sets)} WHERE {where} RETURNING owner_id"

        with self._connection() as conn:
            rows = conn.execute(sql, params).fetchall()
            conn.commit()

        if not rows:
            raise TaskNotFoundError(int(task_id))
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(fields))
        self._notify([str(rows[0]["owner_id"])])

    def delete_task(self, task_id: int, *, owner_id: str | None = None) -> None:
        where, params = self._id_clause(task_id, owner_id)
        with self._connection() as conn:
            rows = conn.execute(f"DELETE FROM tasks WHERE {where} RETURNING owner_id", params).fetchall()
            conn.commit()

        if not rows:
            raise TaskNotFoundError(int(task_id))
        logger.debug("Task deleted id=%s", task_id)
        self._notify([str(rows[0]["owner_id"])])


def normalize_assignees(names: Iterable[str] | None) -> list[str]:
    """Strip blanks and drop duplicates, keeping first-seen order."""
    out: list[str] = []
    for raw in names or ():
        name = str(raw).strip()
        if name and name not in out:
            out.append(name)
    return out
