"""Watch mode: rebuild whenever a file the manifest depends on changes."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

from .coordinator import RebuildCoordinator
from .logging import get_logger
from .manifest import ManifestError, load_manifest
from .models import BuildTrigger
from .watcher import DependencyWatcher


class WatchSession:
    """Wires a :class:`DependencyWatcher` to a :class:`RebuildCoordinator`.

    Edits to the manifest refresh the watch set before the rebuild is
    requested; an invalid manifest keeps the previous watch set active so
    fixing the file is still noticed.
    """

    def __init__(
        self,
        manifest_path: Path,
        build: Callable[[], Any],
        *,
        observer: Any | None = None,
    ) -> None:
        self.logger = get_logger("watch")
        self.coordinator = RebuildCoordinator(build)
        self.watcher = DependencyWatcher(manifest_path, self.handle_change, observer=observer)

    @property
    def manifest_path(self) -> Path:
        return self.watcher.manifest_path

    def start(self) -> None:
        """Register watches and run the initial build."""
        document = load_manifest(self.manifest_path)
        self.coordinator.start()
        self.watcher.start(document)
        self.logger.info("Watching: %s", self.watcher.base_dir)
        self.coordinator.notify()

    def stop(self) -> None:
        self.watcher.stop()
        self.coordinator.stop()

    def run(self, stop_event: threading.Event, *, poll_interval: float = 0.5) -> None:
        """Block until ``stop_event`` is set, then shut down cleanly."""
        self.start()
        try:
            while not stop_event.wait(poll_interval):
                pass
        finally:
            self.stop()

    def handle_change(self, trigger: BuildTrigger) -> None:
        if trigger.kind == "created":
            self.logger.info("New file detected, rebuilding subgraph")
        else:
            self.logger.info("File change detected, rebuilding subgraph")
        if trigger.path == self.manifest_path:
            self._refresh_watch_set()
        self.coordinator.notify(trigger)

    def _refresh_watch_set(self) -> None:
        try:
            delta = self.watcher.refresh(load_manifest(self.manifest_path))
        except ManifestError as exc:
            self.logger.warning("Keeping previous watch set: %s", exc)
            return
        if delta.added or delta.removed:
            self.logger.info(
                "Watch set updated (+%d, -%d)", len(delta.added), len(delta.removed)
            )


__all__ = ["WatchSession"]
