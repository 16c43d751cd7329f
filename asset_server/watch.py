"""Filesystem watcher that keeps a category cache in sync with its directory.

This module handles:
- Subscribing to change notifications for one directory (watchdog)
- Forwarding events and errors to a per-category worker thread over a queue
- Re-scanning the directory and swapping the cache snapshot on relevant events

Each category gets its own watcher, so a broken directory only affects the
category it belongs to.
"""

import logging
import os
import queue
import threading
from enum import Enum
from typing import Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .cache import CategoryCache
from .scanner import list_directory
from .settings import CategorySettings

logger = logging.getLogger(__name__)

# Only events that can change the set of filenames trigger a re-scan
RELEVANT_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})

DEFAULT_POLL_INTERVAL = 1.0

_CLOSED = object()


class WatchState(str, Enum):
    STARTING = "starting"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchRuntimeError(RuntimeError):
    """Error surfaced by a running subscription."""


class _EventBridge(FileSystemEventHandler):
    """Forwards every watchdog event to the watcher's queue."""

    def __init__(self, inbox: queue.Queue):
        super().__init__()
        self._inbox = inbox

    def on_any_event(self, event: FileSystemEvent) -> None:
        self._inbox.put(event)


class CategoryWatcher:
    """Background task that refreshes one category's cache."""

    def __init__(
        self,
        category: CategorySettings,
        cache: CategoryCache,
        observer_factory: Callable = Observer,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize the watcher.

        Args:
            category: The category whose directory is watched.
            cache: The cache this watcher is the only writer of.
            observer_factory: Builds the watchdog observer. Pass
                ``PollingObserver`` where native notifications are unavailable.
            poll_interval: Seconds between subscription health checks.
        """
        self.category = category
        self.cache = cache
        self.poll_interval = poll_interval
        self.state = WatchState.STARTING
        self._observer_factory = observer_factory
        self._observer = None
        self._inbox: queue.Queue = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._settled = threading.Event()
        self._stats = {
            "events_seen": 0,
            "events_ignored": 0,
            "rescans": 0,
            "errors": 0,
        }

    @property
    def label(self) -> str:
        return self.category.label

    def start(self):
        """Start the watcher thread."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self.run,
            name=f"watch-{self.category.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float = 5.0):
        """Ask the watcher to stop and wait for it to release its subscription."""
        if self._thread is None:
            return
        self._inbox.put(_CLOSED)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(f"[{self.label}] Watcher did not stop within {timeout}s")

    def wait_until_watching(self, timeout: Optional[float] = None) -> bool:
        """Block until the subscription is established or has failed.

        Returns:
            True if the watcher is in the WATCHING state.
        """
        self._settled.wait(timeout)
        return self.state is WatchState.WATCHING

    def get_stats(self) -> dict:
        """Get watcher statistics."""
        return {
            **self._stats,
            "state": self.state.value,
        }

    def run(self):
        """Thread body: subscribe, then process events until closed."""
        try:
            if not self._subscribe():
                return
            self.state = WatchState.WATCHING
            self._settled.set()
            logger.info(f"[{self.label}] Watching {self.category.directory}")
            self._watch_loop()
        finally:
            self._release()
            self.state = WatchState.STOPPED
            self._settled.set()
            logger.info(f"[{self.label}] Watcher stopped")

    def _subscribe(self) -> bool:
        directory = self.category.directory
        try:
            if not os.path.isdir(directory):
                raise FileNotFoundError(f"no such directory: '{directory}'")
            observer = self._observer_factory()
            observer.schedule(_EventBridge(self._inbox), directory, recursive=False)
            observer.start()
        except Exception as e:
            logger.error(f"[{self.label}] Failed to watch directory {directory}: {e}")
            return False
        self._observer = observer
        return True

    def _release(self):
        if self._observer is None:
            return
        try:
            self._observer.stop()
            self._observer.join(self.poll_interval * 5)
        except Exception as e:
            logger.error(f"[{self.label}] Error releasing watcher: {e}")
        self._observer = None

    def _watch_loop(self):
        while True:
            try:
                message = self._inbox.get(timeout=self.poll_interval)
            except queue.Empty:
                self._check_subscription()
                continue

            if message is _CLOSED:
                return
            if isinstance(message, WatchRuntimeError):
                self._stats["errors"] += 1
                logger.error(f"[{self.label}] Watcher error: {message}")
                continue
            self.handle_event(message)

    def _check_subscription(self):
        """Turn a dead observer into an error followed by a close."""
        observer = self._observer
        if observer is None:
            return
        alive = observer.is_alive() and all(e.is_alive() for e in observer.emitters)
        if not alive:
            self._inbox.put(WatchRuntimeError(
                f"subscription to {self.category.directory} was lost"
            ))
            self._inbox.put(_CLOSED)

    def handle_event(self, event: FileSystemEvent) -> bool:
        """Process one filesystem event.

        Returns:
            True if the event triggered a re-scan.
        """
        self._stats["events_seen"] += 1
        if event.event_type not in RELEVANT_EVENT_TYPES:
            self._stats["events_ignored"] += 1
            return False

        try:
            names = list_directory(self.category.directory)
        except OSError as e:
            self._stats["errors"] += 1
            logger.warning(
                f"[{self.label}] Rescan failed, keeping {self.cache.count()} cached files: {e}"
            )
            return True

        self.cache.replace(names)
        self._stats["rescans"] += 1
        logger.info(f"[{self.label}] Cache updated due to event: {event}")
        return True
