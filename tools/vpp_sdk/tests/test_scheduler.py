from __future__ import annotations

import sys
import threading
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from vpp_sdk_core.core import RunCancelled, VppSdkError, WorkUnit, raise_if_stopped, run_units  # noqa: E402


class RunUnitsTests(unittest.TestCase):
    def test_sequential_preserves_order(self) -> None:
        calls: list[str] = []

        def make(name: str) -> WorkUnit:
            def run(stop: threading.Event) -> dict[str, str]:
                calls.append(name)
                return {"name": name}

            return WorkUnit(name=name, run=run)

        results = run_units([make("a"), make("b"), make("c")])
        self.assertEqual(calls, ["a", "b", "c"])
        self.assertEqual([item["name"] for item in results], ["a", "b", "c"])

    def test_sequential_stops_at_first_error(self) -> None:
        calls: list[str] = []

        def fail(stop: threading.Event) -> dict[str, str]:
            calls.append("b")
            raise VppSdkError("boom", exit_code=7)

        units = [
            WorkUnit(name="a", run=lambda stop: calls.append("a") or {}),
            WorkUnit(name="b", run=fail),
            WorkUnit(name="c", run=lambda stop: calls.append("c") or {}),
        ]
        with self.assertRaises(VppSdkError) as ctx:
            run_units(units)
        self.assertEqual(ctx.exception.exit_code, 7)
        self.assertEqual(calls, ["a", "b"])

    def test_concurrent_results_follow_unit_order(self) -> None:
        barrier = threading.Barrier(3, timeout=5)

        def make(name: str) -> WorkUnit:
            def run(stop: threading.Event) -> dict[str, str]:
                barrier.wait()
                return {"name": name}

            return WorkUnit(name=name, run=run)

        results = run_units([make("x"), make("y"), make("z")], jobs=3)
        self.assertEqual([item["name"] for item in results], ["x", "y", "z"])

    def test_concurrent_failure_stops_running_and_queued_units(self) -> None:
        started: list[str] = []
        stopped: list[str] = []

        def failing(stop: threading.Event) -> dict[str, str]:
            started.append("fail")
            raise VppSdkError("first failure", exit_code=5)

        def slow(stop: threading.Event) -> dict[str, str]:
            started.append("slow")
            self.assertTrue(stop.wait(timeout=5))
            try:
                raise_if_stopped(stop, "slow", "its second step")
            except RunCancelled:
                stopped.append("slow")
                raise
            return {}

        def later(stop: threading.Event) -> dict[str, str]:
            started.append("later")
            return {}

        units = [
            WorkUnit(name="fail", run=failing),
            WorkUnit(name="slow", run=slow),
            WorkUnit(name="later", run=later),
        ]
        with self.assertRaises(VppSdkError) as ctx:
            run_units(units, jobs=2)

        self.assertNotIsInstance(ctx.exception, RunCancelled)
        self.assertEqual(str(ctx.exception), "first failure")
        self.assertEqual(ctx.exception.exit_code, 5)
        self.assertEqual(sorted(started), ["fail", "slow"])
        self.assertNotIn("later", started)
        self.assertEqual(stopped, ["slow"])

    def test_raise_if_stopped_ignores_missing_or_clear_event(self) -> None:
        raise_if_stopped(None, "amd64", "extracting")
        raise_if_stopped(threading.Event(), "amd64", "extracting")

        stop = threading.Event()
        stop.set()
        with self.assertRaises(RunCancelled) as ctx:
            raise_if_stopped(stop, "amd64", "extracting")
        self.assertIn("[amd64] stopped before extracting", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
