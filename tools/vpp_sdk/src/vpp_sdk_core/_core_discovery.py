from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ._core_base import RootNotFound

DEFAULT_IGNORED_VERSIONS = frozenset({"bin", "src"})


def discover_versions(root: Path, ignored: Iterable[str] = DEFAULT_IGNORED_VERSIONS, *, verbose: bool = True) -> list[str]:
    """Return the version directory names under ``root``.

    Every immediate subdirectory is a candidate version unless its name is in
    ``ignored`` (exact match). Plain files are skipped. The result is sorted so
    repeated runs walk versions in the same order.
    """
    if not root.is_dir():
        raise RootNotFound(f"Directory not found: {root}")

    ignored_names = frozenset(ignored)
    versions: list[str] = []
    for entry in sorted(root.iterdir(), key=lambda item: item.name):
        if not entry.is_dir():
            continue
        if entry.name in ignored_names:
            if verbose:
                print(f"Skipping ignored version: {entry.name}")
            continue
        versions.append(entry.name)
    return versions
