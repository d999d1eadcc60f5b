from __future__ import annotations

import threading
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import List

from graphbuild.coordinator import CoordinatorState, RebuildCoordinator
from graphbuild.models import BuildTrigger


class GatedBuild:
    """Build callable that blocks until released so state can be observed."""

    def __init__(self, fail_first: bool = False) -> None:
        self.gate = threading.Event()
        self.calls = 0
        self.fail_first = fail_first

    def __call__(self) -> None:
        self.calls += 1
        if not self.gate.wait(5):
            raise TimeoutError("build was never released")
        if self.fail_first and self.calls == 1:
            raise RuntimeError("asc exited with status 1")


def _trigger(name: str = "mapping.ts") -> BuildTrigger:
    return BuildTrigger(path=Path("/project") / name, timestamp=datetime.now(UTC))


def test_burst_of_changes_coalesces_into_one_follow_up_build() -> None:
    build = GatedBuild()
    coordinator = RebuildCoordinator(build)
    coordinator.start()

    assert coordinator.notify(_trigger()) is CoordinatorState.BUILDING
    assert coordinator.notify(_trigger("schema.graphql")) is CoordinatorState.PENDING
    assert coordinator.notify(_trigger("abi/Example.json")) is CoordinatorState.PENDING

    build.gate.set()
    assert coordinator.wait_until_idle(5)

    assert build.calls == 2
    assert coordinator.builds_started == 2
    assert coordinator.state is CoordinatorState.IDLE
    coordinator.stop(5)


def test_single_change_runs_single_build() -> None:
    build = GatedBuild()
    build.gate.set()
    coordinator = RebuildCoordinator(build)
    coordinator.start()

    coordinator.notify()
    assert coordinator.wait_until_idle(5)

    assert build.calls == 1
    coordinator.stop(5)


def test_failed_build_does_not_block_later_builds() -> None:
    errors: List[BaseException] = []
    build = GatedBuild(fail_first=True)
    build.gate.set()
    coordinator = RebuildCoordinator(build, on_error=errors.append)
    coordinator.start()

    coordinator.notify()
    assert coordinator.wait_until_idle(5)
    assert coordinator.builds_failed == 1
    assert len(errors) == 1
    assert "status 1" in str(errors[0])

    coordinator.notify()
    assert coordinator.wait_until_idle(5)
    assert build.calls == 2
    assert coordinator.builds_failed == 1
    coordinator.stop(5)


def test_failure_while_pending_still_runs_follow_up() -> None:
    build = GatedBuild(fail_first=True)
    coordinator = RebuildCoordinator(build)
    coordinator.start()

    coordinator.notify()
    coordinator.notify()
    build.gate.set()

    assert coordinator.wait_until_idle(5)
    assert build.calls == 2
    assert coordinator.builds_failed == 1
    coordinator.stop(5)


def test_error_handler_failures_are_contained() -> None:
    def broken_handler(exc: BaseException) -> None:
        raise ValueError("handler broke")

    def build() -> None:
        raise RuntimeError("compile failed")

    coordinator = RebuildCoordinator(build, on_error=broken_handler)
    coordinator.start()
    coordinator.notify()

    assert coordinator.wait_until_idle(5)
    assert coordinator.builds_failed == 1
    coordinator.stop(5)


def test_notifications_ignored_unless_running() -> None:
    build = GatedBuild()
    build.gate.set()
    coordinator = RebuildCoordinator(build)

    assert coordinator.notify() is CoordinatorState.IDLE
    assert not coordinator.running

    coordinator.start()
    coordinator.notify()
    assert coordinator.wait_until_idle(5)
    coordinator.stop(5)

    assert coordinator.notify() is CoordinatorState.IDLE
    assert build.calls == 1


def test_stop_waits_for_in_flight_build() -> None:
    build = GatedBuild()
    coordinator = RebuildCoordinator(build)
    coordinator.start()
    coordinator.notify()
    coordinator.notify()

    stopper = threading.Thread(target=coordinator.stop, args=(5,))
    stopper.start()
    deadline = time.monotonic() + 5
    while coordinator.running and time.monotonic() < deadline:
        time.sleep(0.01)
    build.gate.set()
    stopper.join(5)

    assert not stopper.is_alive()
    assert coordinator.state is CoordinatorState.IDLE
    # The pending rebuild is dropped once the coordinator stops.
    assert build.calls == 1
