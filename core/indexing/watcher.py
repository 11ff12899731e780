# Path: core/indexing/watcher.py
# Purpose: Keep the published index in sync with the home folder as files change.
# Layer: core/indexing.
# Details: Filters out the server's own derivative writes and coalesces bursts of events behind a throttle tick.

from __future__ import annotations

import enum
import logging
import os
import queue
import threading
import time
from pathlib import Path
from typing import Optional, Union

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from core.errors import WatchInitError

from .handle import IndexHandle
from .loader import ImageLoader

logger = logging.getLogger(__name__)

# Opened/closed events fire whenever an original is read (resizing, serving) and must not trigger reloads.
RELEVANT_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})

_STOP = object()
_RELOAD = object()


class WatcherState(enum.Enum):
    IDLE = "idle"
    PENDING_CHANGE = "pending_change"
    RELOADING = "reloading"


class _QueueingHandler(FileSystemEventHandler):
    """Forward relevant watchdog events from the observer thread to the watcher loop."""

    def __init__(self, events: "queue.Queue[object]") -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in RELEVANT_EVENT_TYPES:
            return
        # A directory is "modified" whenever one of its children changes, derivatives included.
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return
        self._events.put(event)


class ChangeWatcher:
    """Rescan and re-optimise the home folder after filesystem changes.

    Events only mark a change as pending. A reload runs on the next throttle
    tick, so a burst of events costs one rescan, at most one per interval.
    A failed reload is logged and the previously published generation keeps
    serving.
    """

    def __init__(
        self,
        home: Path | str,
        loader: ImageLoader,
        handle: IndexHandle,
        interval: float,
    ) -> None:
        self.home = os.fspath(home)
        self.loader = loader
        self.handle = handle
        self.interval = interval
        self.state = WatcherState.IDLE
        self._events: "queue.Queue[object]" = queue.Queue()
        self._observer: Optional[Observer] = None
        self._thread: Optional[threading.Thread] = None
        self._observer_lost = False

    # State machine
    def observe(self, path: Union[str, bytes], dest_path: Union[str, bytes, None] = None) -> bool:
        """Record a change at ``path``; return True if it made a reload pending.

        Changes to derivative files are the server's own writes and are
        ignored. A move counts unless both ends are derivatives.
        """

        paths = [os.fsdecode(path)]
        if dest_path:
            paths.append(os.fsdecode(dest_path))
        if all(self.loader.is_derivative(p) for p in paths):
            return False
        logger.info("watcher event: %s", " -> ".join(paths))
        self.state = WatcherState.PENDING_CHANGE
        return True

    def request_reload(self) -> None:
        """Mark a change as pending without a filesystem event."""

        if self.running:
            # State is only touched by the loop thread once it runs.
            self._events.put(_RELOAD)
        else:
            self.state = WatcherState.PENDING_CHANGE

    def tick(self) -> bool:
        """Reload if a change is pending. Return True when a new generation was published."""

        if self.state is not WatcherState.PENDING_CHANGE:
            return False

        self.state = WatcherState.RELOADING
        try:
            entries = self.loader.reload(self.home)
        except Exception:
            logger.exception("failed to reload %s; keeping previous index", self.home)
            return False
        finally:
            self.state = WatcherState.IDLE

        generation = self.handle.publish(entries)
        logger.info("home path refresh completed: generation %d with %d photos", generation.number, len(entries))
        return True

    # Lifecycle
    def start(self) -> None:
        """Start watching ``home`` recursively. Raises WatchInitError when that is impossible."""

        if not os.path.isdir(self.home):
            raise WatchInitError(f"cannot watch {self.home}: not a directory")
        observer = Observer()
        try:
            observer.schedule(_QueueingHandler(self._events), self.home, recursive=True)
            observer.start()
        except Exception as exc:
            raise WatchInitError(f"failed to watch {self.home}: {exc}") from exc
        self._observer = observer

        self._thread = threading.Thread(target=self._run, name="change-watcher", daemon=True)
        self._thread.start()
        logger.info("watching %s for changes every %.1fs", self.home, self.interval)

    def close(self) -> None:
        """Stop event delivery, drain queued events, and wait for the loop to exit."""

        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join()

        thread, self._thread = self._thread, None
        if thread is not None:
            self._events.put(_STOP)
            thread.join()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        next_tick = time.monotonic() + self.interval
        while True:
            if time.monotonic() >= next_tick:
                self._check_observer()
                self.tick()
                next_tick = time.monotonic() + self.interval

            try:
                item = self._events.get(timeout=max(0.0, next_tick - time.monotonic()))
            except queue.Empty:
                continue
            if item is _STOP:
                return
            if item is _RELOAD:
                self.state = WatcherState.PENDING_CHANGE
                continue
            self.observe(item.src_path, getattr(item, "dest_path", None))

    def _check_observer(self) -> None:
        observer = self._observer
        if observer is not None and not observer.is_alive() and not self._observer_lost:
            self._observer_lost = True
            logger.error("file watcher stopped unexpectedly; changes to %s will not be picked up", self.home)
