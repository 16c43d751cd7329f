"""Tests for the per-category filesystem watcher."""

import functools
import os
from pathlib import Path

import pytest
from watchdog.events import (
    DirDeletedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)
from watchdog.observers.polling import PollingObserver

from asset_server import watch
from asset_server.cache import CategoryCache
from asset_server.scanner import scan_directory
from asset_server.settings import CategorySettings
from asset_server.watch import CategoryWatcher, WatchState

from .helpers import ObserverFactory, wait_for


@pytest.fixture
def seeded_cache(gary_dir: Path) -> CategoryCache:
    return CategoryCache("gary", scan_directory(str(gary_dir)))


def _watcher(category, cache, factory, poll_interval=0.05) -> CategoryWatcher:
    return CategoryWatcher(category, cache, observer_factory=factory, poll_interval=poll_interval)


@pytest.mark.parametrize(
    "event",
    [
        FileModifiedEvent("/gary/Gary1.jpg"),
        FileClosedEvent("/gary/Gary1.jpg"),
    ],
)
def test_irrelevant_events_do_not_rescan(
    event, gary_category, seeded_cache, observer_factory, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls = []
    monkeypatch.setattr(watch, "list_directory", lambda path: calls.append(path) or [])
    watcher = _watcher(gary_category, seeded_cache, observer_factory)

    assert watcher.handle_event(event) is False

    assert calls == []
    assert seeded_cache.count() == 2
    assert watcher.get_stats()["events_ignored"] == 1


@pytest.mark.parametrize(
    "event",
    [
        FileCreatedEvent("/gary/Gary3.jpg"),
        FileDeletedEvent("/gary/Gary1.jpg"),
        FileMovedEvent("/gary/Gary1.jpg", "/gary/Gary9.jpg"),
    ],
)
def test_relevant_events_replace_snapshot(
    event, gary_category, gary_dir, seeded_cache, observer_factory
) -> None:
    (gary_dir / "Gary3.jpg").write_bytes(b"")
    watcher = _watcher(gary_category, seeded_cache, observer_factory)

    assert watcher.handle_event(event) is True

    assert seeded_cache.count() == 3
    assert watcher.get_stats()["rescans"] == 1


def test_failed_rescan_keeps_last_snapshot(
    gary_category, gary_dir, seeded_cache, observer_factory, tmp_path
) -> None:
    os.rename(gary_dir, tmp_path / "gone")
    watcher = _watcher(gary_category, seeded_cache, observer_factory)

    assert watcher.handle_event(DirDeletedEvent(str(gary_dir))) is True

    assert seeded_cache.count() == 2
    assert watcher.get_stats()["errors"] == 1


def test_successful_empty_rescan_replaces_snapshot(
    gary_category, gary_dir, seeded_cache, observer_factory
) -> None:
    for child in gary_dir.iterdir():
        child.unlink()
    watcher = _watcher(gary_category, seeded_cache, observer_factory)

    watcher.handle_event(FileDeletedEvent(str(gary_dir / "Gary1.jpg")))

    assert seeded_cache.count() == 0
    assert seeded_cache.pick_random("Gary76.jpg") == "Gary76.jpg"


def test_watcher_lifecycle_with_events(
    gary_category, gary_dir, seeded_cache, observer_factory: ObserverFactory
) -> None:
    watcher = _watcher(gary_category, seeded_cache, observer_factory)
    assert watcher.state is WatchState.STARTING

    watcher.start()
    assert watcher.wait_until_watching(timeout=5)
    observer = observer_factory.last
    assert observer.path == str(gary_dir)
    assert observer.recursive is False

    (gary_dir / "Gary3.jpg").write_bytes(b"")
    observer.emit(FileCreatedEvent(str(gary_dir / "Gary3.jpg")))
    assert wait_for(lambda: seeded_cache.count() == 3)
    assert "Gary3.jpg" in seeded_cache.snapshot()

    watcher.stop()
    assert watcher.state is WatchState.STOPPED
    assert observer.stopped


def test_subscription_failure_leaves_snapshot_untouched(
    tmp_path: Path, observer_factory: ObserverFactory
) -> None:
    category = CategorySettings(name="gully", directory=str(tmp_path / "missing"), default="Gully1.jpg")
    cache = CategoryCache("gully", ["Gully1.jpg"])
    watcher = _watcher(category, cache, observer_factory)

    watcher.start()

    assert watcher.wait_until_watching(timeout=5) is False
    assert watcher.state is WatchState.STOPPED
    assert observer_factory.created == []
    assert cache.snapshot() == ("Gully1.jpg",)
    watcher.stop()


def test_lost_subscription_stops_watcher(
    gary_category, seeded_cache, observer_factory: ObserverFactory
) -> None:
    watcher = _watcher(gary_category, seeded_cache, observer_factory)
    watcher.start()
    assert watcher.wait_until_watching(timeout=5)

    observer_factory.last.alive = False

    assert wait_for(lambda: watcher.state is WatchState.STOPPED)
    assert watcher.get_stats()["errors"] == 1
    assert seeded_cache.count() == 2


def test_stop_before_start_is_a_no_op(gary_category, seeded_cache, observer_factory) -> None:
    watcher = _watcher(gary_category, seeded_cache, observer_factory)

    watcher.stop()

    assert watcher.state is WatchState.STARTING


def test_polling_observer_picks_up_new_file(gary_category, gary_dir, seeded_cache) -> None:
    factory = functools.partial(PollingObserver, timeout=0.1)
    watcher = _watcher(gary_category, seeded_cache, factory)
    watcher.start()
    try:
        assert watcher.wait_until_watching(timeout=5)
        assert seeded_cache.count() == 2

        (gary_dir / "Gary3.jpg").write_bytes(b"\xff\xd8")

        assert wait_for(lambda: seeded_cache.count() == 3)
        assert "Gary3.jpg" in seeded_cache.snapshot()
    finally:
        watcher.stop()


def test_polling_observer_keeps_snapshot_when_directory_disappears(
    gary_category, gary_dir, seeded_cache, tmp_path
) -> None:
    factory = functools.partial(PollingObserver, timeout=0.1)
    watcher = _watcher(gary_category, seeded_cache, factory)
    watcher.start()
    try:
        assert watcher.wait_until_watching(timeout=5)

        os.rename(gary_dir, tmp_path / "gone")

        assert wait_for(lambda: watcher.get_stats()["errors"] > 0)
        assert wait_for(lambda: watcher.state is WatchState.STOPPED)
        assert seeded_cache.count() == 2
    finally:
        watcher.stop()
