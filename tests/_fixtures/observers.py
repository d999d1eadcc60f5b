"""Test double for the watchdog observer used by the dependency watcher."""

from __future__ import annotations

from typing import Any, List, Tuple


class FakeObserver:
    """Records watch registrations instead of touching the OS."""

    def __init__(self) -> None:
        self.handler: Any = None
        self.scheduled: List[Tuple[str, bool]] = []
        self.unscheduled: List[Tuple[str, bool]] = []
        self.started = False
        self.stopped = False
        self.joined = False

    def schedule(self, handler: Any, path: str, recursive: bool = False):
        self.handler = handler
        watch = (path, recursive)
        self.scheduled.append(watch)
        return watch

    def unschedule(self, watch) -> None:
        self.unscheduled.append(watch)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        self.joined = True


__all__ = ["FakeObserver"]
