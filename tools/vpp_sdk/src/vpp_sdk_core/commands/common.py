from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403


def load_config_from_args(args: argparse.Namespace) -> dict[str, Any]:
    config_path = getattr(args, "config", None)
    return load_config(Path(config_path).resolve() if config_path else None)


def resolve_jobs(args: argparse.Namespace) -> int:
    jobs = getattr(args, "jobs", None)
    if jobs is None:
        return 1
    if jobs < 1:
        raise ConfigurationError("--jobs must be a positive integer")
    return int(jobs)


def write_report_if_requested(args: argparse.Namespace, payload: dict[str, Any]) -> None:
    report_path = getattr(args, "report_json", None)
    if report_path:
        write_json(Path(report_path).resolve(), payload)
