"""In-memory filename cache for a single asset category."""

import threading
from typing import Iterable, Tuple

from .scanner import pick_random


class CategoryCache:
    """Holds the current snapshot of filenames for one category.

    The snapshot is an immutable tuple. Readers grab the current reference once
    and work on it, so they never block each other and never see a mix of two
    snapshots. ``replace`` swaps the reference; only the category's watcher
    thread calls it once the service is running.
    """

    def __init__(self, name: str, names: Iterable[str] = ()):
        self.name = name
        self._snapshot: Tuple[str, ...] = tuple(names)
        self._write_lock = threading.Lock()

    def replace(self, names: Iterable[str]) -> None:
        """Swap the held snapshot for a new one."""
        snapshot = tuple(names)
        with self._write_lock:
            self._snapshot = snapshot

    def snapshot(self) -> Tuple[str, ...]:
        """Return the current snapshot."""
        return self._snapshot

    def pick_random(self, default: str) -> str:
        """Pick a random filename from the current snapshot."""
        return pick_random(self._snapshot, default)

    def count(self) -> int:
        return len(self._snapshot)

    def __repr__(self) -> str:
        return f"CategoryCache({self.name!r}, count={self.count()})"
