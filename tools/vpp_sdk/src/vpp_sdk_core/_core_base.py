from __future__ import annotations

import datetime as dt
import json
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

TOOL_VERSION = "1.0.0"


class VppSdkError(Exception):
    exit_code = 1

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(VppSdkError):
    pass


class UnknownArchitecture(ConfigurationError):
    pass


class MissingPrerequisite(VppSdkError):
    pass


class RootNotFound(MissingPrerequisite):
    pass


class NetworkFailure(VppSdkError):
    pass


class DownloadFailed(NetworkFailure):
    pass


class ExtractionFailed(VppSdkError):
    pass


class MandatoryArtifactMissing(VppSdkError):
    exit_code = 2


class LibraryNotFound(MandatoryArtifactMissing):
    pass


class ExternalToolFailure(VppSdkError):
    pass


class RunCancelled(VppSdkError):
    """Raised inside a unit that stopped because another unit failed first."""


def load_json(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Unable to read JSON file '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in '{path}': {exc}") from exc


def write_json(path: Path, value: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(value, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_relative_path(root: Path, value: str) -> Path:
    path = Path(value)
    if path.is_absolute():
        return path
    return root / path


def now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc).replace(microsecond=0)


def utc_timestamp_now() -> str:
    return now_utc().isoformat()


def render_template(template: str, replacements: dict[str, str]) -> str:
    current = template
    for key, value in replacements.items():
        current = current.replace("{" + key + "}", value)
    return current


def copy_file_atomic(source: Path, destination_dir: Path) -> Path:
    """Copy ``source`` into ``destination_dir`` under the same name.

    The file is written to a temporary name next to the target and renamed
    into place, so concurrent writers of the same name never leave a torn file.
    """
    destination_dir.mkdir(parents=True, exist_ok=True)
    target = destination_dir / source.name
    fd, temp_name = tempfile.mkstemp(prefix=f".{source.name}.", dir=destination_dir)
    os.close(fd)
    temp_path = Path(temp_name)
    try:
        shutil.copyfile(source, temp_path)
        shutil.copymode(source, temp_path)
        os.replace(temp_path, target)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return target


def resolve_workspace_root(start: Path) -> Path:
    git = shutil.which("git")
    if git is not None:
        proc = subprocess.run(
            [git, "-C", str(start), "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
        )
        if proc.returncode == 0 and proc.stdout.strip():
            return Path(proc.stdout.strip()).resolve()
    return start.resolve()


def print_warning(unit: str, message: str) -> None:
    print(f"[{unit}] warning: {message}")
