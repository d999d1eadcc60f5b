"""Serialised, coalescing rebuild scheduling for watch mode."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Optional

from .logging import get_logger
from .models import BuildTrigger


class CoordinatorState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    PENDING = "pending"


class RebuildCoordinator:
    """Runs at most one build at a time and folds bursts of changes together.

    ``notify`` while idle starts a build on a worker thread. Notifications
    that arrive while a build runs mark a single follow-up build as pending;
    further notifications before that follow-up starts are absorbed by it.
    A build is never interrupted, and a failing build is treated exactly
    like a successful one.
    """

    def __init__(
        self,
        build: Callable[[], Any],
        *,
        on_error: Callable[[BaseException], None] | None = None,
    ) -> None:
        self._build = build
        self._on_error = on_error
        self.logger = get_logger("coordinator")
        self._condition = threading.Condition()
        self._state = CoordinatorState.IDLE
        self._running = False
        self._worker: Optional[threading.Thread] = None
        self.builds_started = 0
        self.builds_failed = 0

    @property
    def state(self) -> CoordinatorState:
        with self._condition:
            return self._state

    @property
    def running(self) -> bool:
        with self._condition:
            return self._running

    def start(self) -> None:
        with self._condition:
            self._running = True

    def stop(self, timeout: float | None = None) -> None:
        """Stop accepting triggers and wait for the in-flight build to finish."""
        with self._condition:
            self._running = False
            worker = self._worker
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout)

    def notify(self, trigger: BuildTrigger | None = None) -> CoordinatorState:
        """Record a change and return the resulting state."""
        with self._condition:
            if not self._running:
                self.logger.debug("Ignoring change notification; coordinator is stopped")
                return self._state
            if trigger is not None:
                self.logger.debug("Change detected (%s): %s", trigger.kind, trigger.path)
            if self._state is CoordinatorState.IDLE:
                self._state = CoordinatorState.BUILDING
                self._spawn_worker()
            elif self._state is CoordinatorState.BUILDING:
                self._state = CoordinatorState.PENDING
            return self._state

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        with self._condition:
            return self._condition.wait_for(
                lambda: self._state is CoordinatorState.IDLE, timeout=timeout
            )

    def _spawn_worker(self) -> None:
        worker = threading.Thread(target=self._run, name="graphbuild-rebuild", daemon=True)
        self._worker = worker
        worker.start()

    def _run(self) -> None:
        while True:
            self._run_build()
            with self._condition:
                if self._state is CoordinatorState.PENDING and self._running:
                    self._state = CoordinatorState.BUILDING
                    continue
                self._state = CoordinatorState.IDLE
                self._condition.notify_all()
                return

    def _run_build(self) -> None:
        with self._condition:
            self.builds_started += 1
            number = self.builds_started
        self.logger.debug("Starting build #%d", number)
        try:
            self._build()
        except Exception as exc:
            with self._condition:
                self.builds_failed += 1
            self.logger.error("Build #%d failed: %s", number, exc)
            self.logger.debug("Build failure details", exc_info=True)
            if self._on_error is not None:
                try:
                    self._on_error(exc)
                except Exception:
                    self.logger.exception("Build error handler failed")


__all__ = ["CoordinatorState", "RebuildCoordinator"]
