# src/weekboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_PACKAGE = __name__.split(".")[0]

# These log on every snapshot push / watcher tick and would drown the prompt.
BACKGROUND_LOGGERS = (
    f"{_PACKAGE}.tasks.task_store",
    f"{_PACKAGE}.tasks.task_watcher",
)


def level_from_name(name: object, default: int = logging.INFO) -> int:
    """'debug' -> logging.DEBUG; unknown names fall back to `default`."""
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


class BoardConsoleFilter(logging.Filter):
    """
    Keep the board readable between prompts:
    - board, command and lifecycle logs pass at the console level
    - the store and the watcher only from `background_level` (WARNING by default)
    - anything outside the package, py.warnings included, only from ERROR
    """

    def __init__(self, background_level: int = logging.WARNING) -> None:
        super().__init__()
        self.background_level = background_level

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == _PACKAGE or name.startswith(_PACKAGE + "."):
            if name.startswith(BACKGROUND_LOGGERS):
                return record.levelno >= self.background_level
            return True
        return record.levelno >= logging.ERROR


def setup_logging(settings, *, file_level: int = logging.DEBUG) -> Path:
    """
    Configure the root logger from Settings and return the log file path.

    - console (stderr): settings.log_level, filtered by BoardConsoleFilter
    - file `<data_dir>/<app_name>.log`: everything from file_level, with the
      thread name so watcher-thread lines can be told apart

    Call this ONCE, before the board is built.
    """
    log_dir = Path(settings.data_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{settings.app_name or _PACKAGE}.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    datefmt = "%Y-%m-%d %H:%M:%S"
    console_fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt)
    file_fmt = logging.Formatter(
        "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt,
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level_from_name(settings.log_level))
    ch.setFormatter(console_fmt)
    background_level = level_from_name(
        getattr(settings, "background_log_level", "WARNING"), logging.WARNING
    )
    ch.addFilter(BoardConsoleFilter(background_level))
    root.addHandler(ch)

    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(file_fmt)
    root.addHandler(fh)

    logging.captureWarnings(True)
    return log_file
