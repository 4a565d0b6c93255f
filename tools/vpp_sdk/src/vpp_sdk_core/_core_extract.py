from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from ._core_base import ExtractionFailed, MissingPrerequisite


class ArchiveExtractor:
    """Unpacks a Debian package's data payload with ``dpkg-deb -x``."""

    def __init__(self, executable: str = "dpkg-deb") -> None:
        self.executable = executable

    def resolve_executable(self) -> str:
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise MissingPrerequisite(f"'{self.executable}' not found on PATH; it is required to extract packages")
        return resolved

    def extract(self, archive: Path, destination: Path) -> Path:
        destination.mkdir(parents=True, exist_ok=True)
        command = [self.resolve_executable(), "-x", str(archive), str(destination)]
        proc = subprocess.run(command, capture_output=True, text=True)
        if proc.returncode != 0:
            stderr = proc.stderr.strip()
            raise ExtractionFailed(
                f"Extraction of '{archive.name}' failed with exit code {proc.returncode}"
                + (f": {stderr}" if stderr else ""),
                exit_code=proc.returncode if proc.returncode > 0 else 1,
            )
        return destination
