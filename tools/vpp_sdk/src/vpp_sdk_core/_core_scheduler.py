from __future__ import annotations

import concurrent.futures
import threading
from dataclasses import dataclass
from typing import Any, Callable

from ._core_base import RunCancelled


@dataclass(frozen=True)
class WorkUnit:
    name: str
    run: Callable[[threading.Event], dict[str, Any]]


def raise_if_stopped(stop: threading.Event | None, unit: str, step: str) -> None:
    if stop is not None and stop.is_set():
        raise RunCancelled(f"[{unit}] stopped before {step}: another unit failed")


def run_units(units: list[WorkUnit], jobs: int = 1) -> list[dict[str, Any]]:
    """Run ``units`` and return their results in unit order.

    Every unit receives the same stop event. The first unit to fail sets it
    from its own worker thread, so a unit picked up afterwards is skipped and
    units already running abandon their remaining steps at the next
    ``raise_if_stopped`` check. With ``jobs <= 1`` units run one after another.
    The first failure is raised once all workers have returned.
    """
    stop = threading.Event()
    lock = threading.Lock()
    errors: list[Exception] = []

    def guarded(unit: WorkUnit) -> dict[str, Any]:
        raise_if_stopped(stop, unit.name, "start")
        try:
            return unit.run(stop)
        except RunCancelled:
            raise
        except Exception as exc:
            with lock:
                errors.append(exc)
                stop.set()
            raise

    if jobs <= 1 or len(units) <= 1:
        return [guarded(unit) for unit in units]

    with concurrent.futures.ThreadPoolExecutor(max_workers=jobs) as executor:
        futures = [executor.submit(guarded, unit) for unit in units]
        concurrent.futures.wait(futures, return_when=concurrent.futures.FIRST_EXCEPTION)
        if stop.is_set():
            for future in futures:
                future.cancel()
    if errors:
        raise errors[0]
    return [future.result() for future in futures]
