"""Dependency discovery and filesystem watch registration for a manifest."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .logging import get_logger
from .manifest import ManifestError
from .models import BuildTrigger, ManifestDocument, WatchSet

logger = get_logger("watcher")


class FileSystemError(RuntimeError):
    """A watched dependency is not present on disk (yet)."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Watched file does not exist yet: {path}")
        self.path = path


@dataclass(frozen=True)
class WatchDelta:
    watch_set: WatchSet
    added: WatchSet
    removed: WatchSet


def discover(document: ManifestDocument, base_dir: Path) -> WatchSet:
    """Return every file ``document`` depends on as absolute paths under ``base_dir``."""
    if not isinstance(document, ManifestDocument):
        raise ManifestError("Dependency discovery requires a parsed manifest document")
    if not document.schema_file:
        raise ManifestError("Missing required field 'schema.file'")
    root = Path(os.path.abspath(base_dir))
    paths = [_absolute(root, document.schema_file)]
    for source in document.data_sources:
        if not source.mapping_file:
            raise ManifestError(f"Missing required field 'mapping.file' in {source.name}")
        paths.append(_absolute(root, source.mapping_file))
        for abi in source.abis:
            if not abi.file:
                raise ManifestError(f"Missing required field 'file' for ABI {abi.name}")
            paths.append(_absolute(root, abi.file))
    return frozenset(paths)


def diff_watch_sets(old: WatchSet, new: WatchSet) -> Tuple[WatchSet, WatchSet]:
    """Return ``(added, removed)`` between two watch sets."""
    return frozenset(new - old), frozenset(old - new)


def missing_files(watch_set: Iterable[Path]) -> List[FileSystemError]:
    return [FileSystemError(path) for path in sorted(watch_set) if not path.exists()]


def _absolute(root: Path, relative: str) -> Path:
    return Path(os.path.normpath(root / relative))


def _watch_target(path: Path) -> Tuple[Path, bool]:
    # Missing parents are covered by watching the nearest existing ancestor recursively.
    parent = path.parent
    if parent.is_dir():
        return parent, False
    for ancestor in parent.parents:
        if ancestor.is_dir():
            return ancestor, True
    return Path(path.anchor), True


class _DependencyEventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "DependencyWatcher") -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.dispatch(os.fsdecode(event.src_path), "created")

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.dispatch(os.fsdecode(event.src_path), "modified")

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors that save atomically rename a temp file over the target.
        if not event.is_directory:
            self._watcher.dispatch(os.fsdecode(event.dest_path), "created")


class DependencyWatcher:
    """Keeps filesystem registrations in line with a manifest's dependencies.

    The manifest file itself is always part of the watch set so edits to it
    can refresh the set. Registrations are per directory and are added and
    removed incrementally; directories that stay relevant keep their watch.
    """

    def __init__(
        self,
        manifest_path: Path,
        on_change: Callable[[BuildTrigger], None],
        *,
        observer: Any | None = None,
    ) -> None:
        self.manifest_path = Path(os.path.abspath(manifest_path))
        self.base_dir = self.manifest_path.parent
        self._on_change = on_change
        self._observer = observer if observer is not None else Observer()
        self._handler = _DependencyEventHandler(self)
        self._watch_set: WatchSet = frozenset()
        self._registrations: Dict[Tuple[Path, bool], Any] = {}
        self._started = False

    @property
    def watch_set(self) -> WatchSet:
        return self._watch_set

    @property
    def watched_directories(self) -> List[Tuple[Path, bool]]:
        return sorted(self._registrations)

    def start(self, document: ManifestDocument) -> WatchDelta:
        delta = self.refresh(document)
        if not self._started:
            self._observer.start()
            self._started = True
        logger.info("Watching %d files", len(self._watch_set))
        return delta

    def stop(self) -> None:
        if not self._started:
            return
        self._observer.stop()
        self._observer.join()
        self._started = False

    def refresh(self, document: ManifestDocument) -> WatchDelta:
        """Recompute the watch set from ``document`` and sync registrations.

        A :class:`ManifestError` leaves the current set and registrations as they were.
        """
        new_set = discover(document, self.base_dir) | {self.manifest_path}
        added, removed = diff_watch_sets(self._watch_set, new_set)
        self._sync_registrations(new_set)
        self._watch_set = new_set
        for path in sorted(added):
            logger.debug("Watching %s", path)
        for path in sorted(removed):
            logger.debug("No longer watching %s", path)
        for problem in missing_files(added):
            logger.warning("%s", problem)
        return WatchDelta(watch_set=new_set, added=added, removed=removed)

    def dispatch(self, raw_path: str, kind: str) -> Optional[BuildTrigger]:
        """Forward a filesystem event when it concerns a watched file."""
        path = Path(os.path.normpath(os.path.abspath(raw_path)))
        if path not in self._watch_set:
            return None
        trigger = BuildTrigger(path=path, timestamp=datetime.now(UTC), kind=kind)
        self._on_change(trigger)
        return trigger

    def _sync_registrations(self, watch_set: WatchSet) -> None:
        needed = {_watch_target(path) for path in watch_set}
        for key in sorted(needed - set(self._registrations)):
            directory, recursive = key
            self._registrations[key] = self._observer.schedule(
                self._handler, str(directory), recursive=recursive
            )
        for key in sorted(set(self._registrations) - needed):
            self._observer.unschedule(self._registrations.pop(key))


__all__ = [
    "DependencyWatcher",
    "FileSystemError",
    "WatchDelta",
    "diff_watch_sets",
    "discover",
    "missing_files",
]
