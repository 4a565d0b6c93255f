from __future__ import annotations

import shlex
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ._core_base import ExternalToolFailure, MissingPrerequisite
from ._core_discovery import DEFAULT_IGNORED_VERSIONS, discover_versions
from ._core_scheduler import WorkUnit, raise_if_stopped, run_units

DEFAULT_GENERATOR_COMMAND = ("cargo", "run", "--package", "vpp-api-gen", "--bin", "api-gen", "--")
MAX_VERBOSITY = 2


@dataclass(frozen=True)
class GeneratorRequest:
    in_path: Path
    package_name: str
    package_path: Path
    out_path: str = "."
    parse_type: str = "Tree"
    verbosity: int = MAX_VERBOSITY


class CodeGeneratorInvoker:
    """Runs the external ``api-gen`` binary for one API-definition tree."""

    def __init__(self, command: list[str] | tuple[str, ...] = DEFAULT_GENERATOR_COMMAND, cwd: Path | None = None) -> None:
        if not command:
            raise MissingPrerequisite("generator command must not be empty")
        self.command = list(command)
        self.cwd = cwd

    def build_argv(self, request: GeneratorRequest) -> list[str]:
        argv = list(self.command)
        argv.extend(
            [
                "--in-file",
                str(request.in_path),
                "--out-file",
                request.out_path,
                "--parse-type",
                request.parse_type,
                "--package-name",
                request.package_name,
                "--package-path",
                str(request.package_path),
                "--print-message-names",
                "--create-binding",
                "--create-package",
                "--generate-code",
            ]
        )
        argv.extend(["--verbose"] * request.verbosity)
        return argv

    def invoke(self, request: GeneratorRequest) -> dict[str, Any]:
        argv = self.build_argv(request)
        rendered = " ".join(shlex.quote(item) for item in argv)
        try:
            proc = subprocess.run(argv, cwd=str(self.cwd) if self.cwd else None)
        except OSError as exc:
            raise MissingPrerequisite(f"Unable to start generator '{argv[0]}': {exc}") from exc
        if proc.returncode != 0:
            raise ExternalToolFailure(
                f"generator failed for package '{request.package_name}' with exit code {proc.returncode}: {rendered}",
                exit_code=proc.returncode if proc.returncode > 0 else 1,
            )
        return {
            "command": rendered,
            "exit_code": proc.returncode,
        }


@dataclass
class BindingGenerationDriver:
    sys_root: Path
    dest: Path
    invoker: CodeGeneratorInvoker
    ignored: frozenset[str] = DEFAULT_IGNORED_VERSIONS
    api_subdir: str = "api"
    verbosity: int = MAX_VERBOSITY

    def versions(self) -> list[str]:
        return discover_versions(self.sys_root, self.ignored)

    def generate_version(self, version: str, stop: threading.Event | None = None) -> dict[str, Any]:
        raise_if_stopped(stop, version, "running the generator")
        print(f"Generating API for version: {version}")
        src_dir = self.dest / version / "src"
        src_dir.mkdir(parents=True, exist_ok=True)
        request = GeneratorRequest(
            in_path=self.sys_root / version / self.api_subdir,
            package_name=version,
            package_path=self.dest,
            verbosity=self.verbosity,
        )
        invocation = self.invoker.invoke(request)
        print(f"[{version}] generate: ok -> {self.dest / version}")
        return {
            "version": version,
            "package_dir": str(self.dest / version),
            "command": invocation["command"],
            "status": "pass",
        }

    def run(self, jobs: int = 1) -> list[dict[str, Any]]:
        units = [
            WorkUnit(name=version, run=lambda stop, version=version: self.generate_version(version, stop))
            for version in self.versions()
        ]
        return run_units(units, jobs=jobs)
