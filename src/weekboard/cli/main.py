# src/weekboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the snapshot watcher in a background thread (optional),
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.task_watcher import WatcherBackgroundRunner, start_watcher_in_background

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Tear down the board subscription and the store's listeners."""
    state.board.close()
    close = getattr(state.task_store, "close", None)
    if callable(close):
        close()


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(settings)

    logger.info("Starting %s (log file %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    watcher: WatcherBackgroundRunner | None = None
    if settings.watch_enabled and hasattr(state.task_store, "refresh_if_changed"):
        watcher = start_watcher_in_background(
            state.task_store,  # type: ignore[arg-type]
            interval_seconds=settings.watch_interval_seconds,
            guard=lambda: state.lock,
        )

    try:
        run_console_loop(state)
    finally:
        if watcher is not None:
            watcher.stop()
            watcher.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
