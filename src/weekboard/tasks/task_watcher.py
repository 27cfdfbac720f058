# src/weekboard/tasks/task_watcher.py

from __future__ import annotations

"""
Snapshot watcher.

A small polling loop that notices writes made outside this process
(another console on the same database file) and makes the store push
fresh snapshots to its subscribers.

In-process mutations notify subscribers directly; the watcher only covers
what the store cannot see itself.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..core.errors import TransientStoreFailure

logger = logging.getLogger(__name__)


class RefreshableStore(Protocol):
    def refresh_if_changed(self) -> bool: ...


async def run_snapshot_watcher(
        store: RefreshableStore,
        *,
        interval_seconds: float = 2.0,
        stop_event: asyncio.Event | None = None,
        guard: Callable[[], contextlib.AbstractContextManager[object]] | None = None,
) -> None:
    """
    Every interval_seconds ask the store to compare its change signature and,
    if it moved, re-deliver snapshots.

    A store outage is logged and retried on the next tick (the live view
    self-heals once the database is readable again).

    To stop the watcher, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.05, float(interval_seconds))
    failing = False

    while stop_event is None or not stop_event.is_set():
        try:
            with guard() if guard is not None else contextlib.nullcontext():
                changed = store.refresh_if_changed()
            if failing:
                logger.info("Task store reachable again.")
                failing = False
            if changed:
                logger.debug("Watcher pushed fresh snapshots.")
        except TransientStoreFailure:
            if not failing:
                logger.warning("Task store unavailable; watcher will retry.", exc_info=True)
            failing = True

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass(slots=True)
class WatcherBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal watcher stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_watcher_in_background(
        store: RefreshableStore,
        *,
        interval_seconds: float = 2.0,
        guard: Callable[[], contextlib.AbstractContextManager[object]] | None = None,
) -> WatcherBackgroundRunner | None:
    """
    Start the watcher in a background thread with its own event loop,
    so the blocking console REPL can run in parallel.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_snapshot_watcher(
                    store,
                    interval_seconds=interval_seconds,
                    stop_event=stop_event,
                    guard=guard,
                )
            )
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="snapshot-watcher", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Watcher thread did not initialize properly.")
        return None

    logger.info("Snapshot watcher started (interval=%.1fs).", interval_seconds)
    return WatcherBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
