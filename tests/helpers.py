"""Test doubles and polling helpers shared across test modules."""

import time
from pathlib import Path


class FakeObserver:
    """Stands in for a watchdog observer; tests push events by hand."""

    def __init__(self):
        self.handler = None
        self.path = None
        self.recursive = None
        self.alive = False
        self.stopped = False
        self.emitters = set()

    def schedule(self, handler, path, recursive=False):
        self.handler = handler
        self.path = path
        self.recursive = recursive

    def start(self):
        self.alive = True

    def stop(self):
        self.alive = False
        self.stopped = True

    def join(self, timeout=None):
        pass

    def is_alive(self):
        return self.alive

    def emit(self, event):
        self.handler.dispatch(event)


class ObserverFactory:
    """Callable observer factory that remembers what it built."""

    def __init__(self):
        self.created = []

    def __call__(self):
        observer = FakeObserver()
        self.created.append(observer)
        return observer

    @property
    def last(self) -> FakeObserver:
        return self.created[-1]


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll predicate until it is true or the deadline passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def make_files(directory: Path, *names: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    for name in names:
        (directory / name).write_bytes(b"\xff\xd8" + name.encode())
    return directory
