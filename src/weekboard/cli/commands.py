# src/weekboard/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from datetime import date
from typing import cast

from ..board.history import history
from ..board.organizer import BoardCard, suggest_kinds
from ..board.week import WEEKDAY_NAMES, weekday_index
from ..core.errors import TransientStoreFailure, ValidationFailure
from ..core.state import AppState
from ..tasks.task_api import add_task, edit_task, find_task, remove_task
from ..tasks.task_models import Task, TaskStatus

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

BACKLOG_WORDS = {"backlog", "none", "-", "unassigned"}
_FULL_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /board, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Invalid input is reported back as the reply; it never reaches the store.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationFailure as e:
            return f"Invalid input: {e}"
        except TransientStoreFailure:
            logger.warning("Store unavailable while handling /%s", name, exc_info=True)
            return "Task store unavailable; nothing changed."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----


def parse_task_id(raw: str) -> int:
    try:
        task_id = int(raw.lstrip("#"))
    except ValueError:
        raise ValidationFailure(f"not a task id: {raw!r}") from None
    if task_id <= 0:
        raise ValidationFailure(f"not a task id: {raw!r}")
    return task_id


def parse_target_date(state: AppState, raw: str) -> date | None:
    """
    Resolve a day argument:
    - "backlog" (or "none", "-") -> None
    - "today"
    - a weekday name ("tue", "Tuesday") -> that day of the viewed week
    - an ISO date "YYYY-MM-DD"
    """
    text = raw.strip().lower()
    if text in BACKLOG_WORDS:
        return None
    if text == "today":
        return state.clock.today()
    if len(text) >= 3:
        for idx, full in enumerate(_FULL_WEEKDAYS):
            if full.startswith(text):
                return state.board.week_dates[idx]
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValidationFailure(f"not a date: {raw!r} (use YYYY-MM-DD, a weekday or 'backlog')") from None


def parse_status(raw: str) -> TaskStatus:
    try:
        return TaskStatus.parse(raw)
    except ValueError:
        choices = ", ".join(s.value for s in TaskStatus)
        raise ValidationFailure(f"unknown status {raw!r} (choose from {choices})") from None


# ---- rendering ----


def _card_line(card: BoardCard) -> str:
    task = card.task
    line = f"  [{task.id}] {task.title} ({task.status.value})"
    if task.kind:
        line += f" #{task.kind}"
    if task.assignees:
        line += " @" + ", @".join(task.assignees)
    if card.is_rollover and card.original_date is not None:
        line += f"  <- rolled over from {card.original_date.isoformat()}"
    return line


def render_board(state: AppState) -> str:
    board = state.board
    dates = board.week_dates
    flt = board.filters
    status_label = flt.status.value if flt.status is not None else "All"

    lines = [
        f"Week {board.week_number}/{board.week_year} ({dates[0].isoformat()} .. {dates[-1].isoformat()})"
        f"  search={flt.search!r} status={status_label}"
    ]
    for day, cards in board.buckets.days.items():
        marker = "  *today*" if board.is_today(day) else ""
        lines.append(f"{WEEKDAY_NAMES[weekday_index(day)]} {day.isoformat()}{marker}")
        if not cards:
            lines.append("  -")
        lines.extend(_card_line(c) for c in cards)

    lines.append("Backlog")
    if not board.buckets.unassigned:
        lines.append("  -")
    lines.extend(_card_line(c) for c in board.buckets.unassigned)
    return "\n".join(lines)


def _task_details(task: Task) -> str:
    return "\n".join(
        [
            f"Task {task.id}: {task.title}",
            f"  Type: {task.kind or '-'}",
            f"  Status: {task.status.value}",
            f"  Assigned: {task.assigned_date.isoformat() if task.assigned_date else 'backlog'}",
            f"  Completed: {task.completion_date.isoformat() if task.completion_date else '-'}",
            f"  Assignees: {', '.join(task.assignees) or '-'}",
            f"  Notes: {task.notes or '-'}",
        ]
    )


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_board(state: AppState, args: list[str]) -> str:
    return render_board(state)


def cmd_week(state: AppState, args: list[str]) -> str:
    """
    /week              -> show the board
    /week N [YEAR]     -> jump to ISO week N (of YEAR, default: the viewed week year)
    """
    if args:
        try:
            week_number = int(args[0])
            week_year = int(args[1]) if len(args) > 1 else state.board.week_year
        except ValueError:
            raise ValidationFailure("usage: /week N [YEAR]") from None
        try:
            state.board.show_week(week_number, week_year)
        except ValueError:
            raise ValidationFailure(f"{week_year} has no ISO week {week_number}") from None
    return render_board(state)


def cmd_next(state: AppState, args: list[str]) -> str:
    try:
        state.board.next_week()
    except ValueError as e:
        raise ValidationFailure(str(e)) from None
    return render_board(state)


def cmd_prev(state: AppState, args: list[str]) -> str:
    try:
        state.board.previous_week()
    except ValueError as e:
        raise ValidationFailure(str(e)) from None
    return render_board(state)


def cmd_today(state: AppState, args: list[str]) -> str:
    state.board.go_to_today()
    return render_board(state)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <title words> [@day] [#type] [+assignee ...]

    @day accepts the same forms as /move (weekday, YYYY-MM-DD, today).
    """
    title_words: list[str] = []
    kind = ""
    assigned: date | None = None
    assignees: list[str] = []
    for token in args:
        if token.startswith("@") and len(token) > 1:
            assigned = parse_target_date(state, token[1:])
        elif token.startswith("#") and len(token) > 1:
            kind = token[1:]
        elif token.startswith("+") and len(token) > 1:
            assignees.append(token[1:])
        else:
            title_words.append(token)

    task_id = add_task(
        state,
        title=" ".join(title_words),
        kind=kind,
        assigned_date=assigned,
        assignees=assignees,
    )
    if task_id is None:
        return "Task store unavailable; task not created."
    if emit is not None and assigned is not None and assigned < state.board.week_dates[0]:
        emit(f"Note: {assigned.isoformat()} is before the viewed week; it shows up as a rollover.")
    where = assigned.isoformat() if assigned else "backlog"
    return f"Created task {task_id} ({where})."


def cmd_move(state: AppState, args: list[str]) -> str:
    """/move <id> <weekday | YYYY-MM-DD | today | backlog>"""
    if len(args) < 2:
        raise ValidationFailure("usage: /move <id> <weekday|YYYY-MM-DD|today|backlog>")
    task_id = parse_task_id(args[0])
    target = parse_target_date(state, args[1])
    if not state.controller.reassign(task_id, target):
        return f"Task {task_id} was not moved."
    return f"Task {task_id} -> {target.isoformat() if target else 'backlog'}."


def cmd_backlog(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValidationFailure("usage: /backlog <id>")
    task_id = parse_task_id(args[0])
    if not state.controller.to_backlog(task_id):
        return f"Task {task_id} was not moved."
    return f"Task {task_id} -> backlog."


def cmd_status(state: AppState, args: list[str]) -> str:
    """/status <id> <NotStarted|InProgress|OnHold|Completed|Cancelled>"""
    if len(args) < 2:
        raise ValidationFailure("usage: /status <id> <status>")
    task_id = parse_task_id(args[0])
    status = parse_status("".join(args[1:]))
    if not state.controller.set_status(task_id, status):
        return f"Task {task_id} status unchanged."
    return f"Task {task_id} -> {status.value}."


def cmd_search(state: AppState, args: list[str]) -> str:
    state.board.set_search(" ".join(args))
    return render_board(state)


def cmd_filter(state: AppState, args: list[str]) -> str:
    """/filter <status> | /filter all"""
    if not args or args[0].lower() == "all":
        state.board.set_status_filter(None)
    else:
        state.board.set_status_filter(parse_status("".join(args)))
    return render_board(state)


def cmd_history(state: AppState, args: list[str]) -> str:
    finished = history(state.task_store.list_history(state.owner_id))
    if not finished:
        return "No completed or cancelled tasks yet."
    lines = ["History:"]
    for task in finished:
        done = task.completion_date.isoformat() if task.completion_date else "----------"
        lines.append(f"  {done} [{task.id}] {task.title} ({task.status.value})")
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValidationFailure("usage: /show <id>")
    task = find_task(state, parse_task_id(args[0]))
    if task is None:
        return f"No task {args[0]}."
    return _task_details(task)


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> title <text>
    /edit <id> type <label>
    /edit <id> notes <text>      (empty clears)
    /edit <id> assignees <a,b>   (empty clears)
    """
    if len(args) < 2:
        raise ValidationFailure("usage: /edit <id> title|type|notes|assignees <value>")
    task_id = parse_task_id(args[0])
    field_name = args[1].lower()
    value = " ".join(args[2:])

    if field_name == "title":
        changes: dict[str, object] = {"title": value}
    elif field_name in ("type", "kind"):
        changes = {"kind": value}
    elif field_name == "notes":
        changes = {"notes": value or None}
    elif field_name == "assignees":
        changes = {"assignees": [p for p in value.split(",") if p.strip()]}
    else:
        raise ValidationFailure(f"cannot edit {field_name!r}")

    if not edit_task(state, task_id, **changes):
        return f"Task {task_id} unchanged."
    return f"Task {task_id} updated."


def cmd_delete(state: AppState, args: list[str]) -> str:
    if len(args) != 1:
        raise ValidationFailure("usage: /delete <id>")
    task_id = parse_task_id(args[0])
    if not remove_task(state, task_id):
        return f"No task {task_id}."
    return f"Task {task_id} deleted."


def cmd_types(state: AppState, args: list[str]) -> str:
    defaults = list(getattr(state.settings, "type_suggestions", []) or [])
    kinds = suggest_kinds(state.board.snapshot, defaults)
    return "Type suggestions: " + (", ".join(kinds) if kinds else "-")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("board", cmd_board, help_text="Show the viewed week.", aliases=["b"])
registry.register("week", cmd_week, help_text="Jump to an ISO week: /week N [YEAR].")
registry.register("next", cmd_next, help_text="Show the next week.", aliases=["n"])
registry.register("prev", cmd_prev, help_text="Show the previous week.", aliases=["p"])
registry.register("today", cmd_today, help_text="Show the current week.")
registry.register(
    "add", cmd_add, help_text="Create a task: /add <title> [@day] [#type] [+assignee]."
)
registry.register(
    "move", cmd_move, help_text="Move a task: /move <id> <weekday|YYYY-MM-DD|today|backlog>."
)
registry.register("backlog", cmd_backlog, help_text="Move a task to the backlog: /backlog <id>.")
registry.register("status", cmd_status, help_text="Set status: /status <id> <status>.")
registry.register("search", cmd_search, help_text="Filter by title: /search <text> (empty clears).")
registry.register("filter", cmd_filter, help_text="Filter by status: /filter <status> | all.")
registry.register("history", cmd_history, help_text="Completed and cancelled tasks.")
registry.register("show", cmd_show, help_text="Task details: /show <id>.")
registry.register(
    "edit", cmd_edit, help_text="Edit a task: /edit <id> title|type|notes|assignees <value>."
)
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("types", cmd_types, help_text="List task type suggestions.")
