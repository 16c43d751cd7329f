"""Per-process ownership of category caches and their watchers."""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from watchdog.observers import Observer

from .cache import CategoryCache
from .scanner import scan_directory
from .settings import CategorySettings, Settings
from .watch import DEFAULT_POLL_INTERVAL, CategoryWatcher

logger = logging.getLogger(__name__)


@dataclass
class CategoryRuntime:
    """Everything the service holds for one category."""
    settings: CategorySettings
    cache: CategoryCache
    watcher: CategoryWatcher

    @property
    def name(self) -> str:
        return self.settings.name

    def pick_random(self) -> str:
        return self.cache.pick_random(self.settings.default)

    def status(self) -> dict:
        return {
            "count": self.cache.count(),
            "directory": self.settings.directory,
            "state": self.watcher.state.value,
            "stats": self.watcher.get_stats(),
        }


class AssetContext:
    """Owns the cache and watcher of every configured category.

    Handlers receive the context through ``app.state``; nothing here is
    module-level state.
    """

    def __init__(
        self,
        settings: Settings,
        observer_factory: Callable = Observer,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.settings = settings
        self.categories: Dict[str, CategoryRuntime] = {}
        for name, category in settings.categories.items():
            cache = CategoryCache(name)
            watcher = CategoryWatcher(
                category,
                cache,
                observer_factory=observer_factory,
                poll_interval=poll_interval,
            )
            self.categories[name] = CategoryRuntime(category, cache, watcher)

    def get(self, name: str) -> Optional[CategoryRuntime]:
        return self.categories.get(name)

    def start(self):
        """Seed every cache with an initial scan, then start the watchers."""
        for runtime in self.categories.values():
            runtime.cache.replace(scan_directory(runtime.settings.directory))
            logger.info(
                f"[{runtime.settings.label}] Cached {runtime.cache.count()} files "
                f"from {runtime.settings.directory}"
            )
        for runtime in self.categories.values():
            runtime.watcher.start()

    def stop(self):
        """Stop every watcher. Caches keep their last snapshot."""
        for runtime in self.categories.values():
            runtime.watcher.stop()

    def status(self) -> dict:
        return {name: runtime.status() for name, runtime in self.categories.items()}
