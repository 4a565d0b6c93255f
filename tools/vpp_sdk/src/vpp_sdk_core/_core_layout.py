from __future__ import annotations

import fnmatch
from typing import Any

from ._core_assembly import DEFAULT_LIBRARY_PATTERNS, DestinationLayout
from ._core_catalog import ArchitectureCatalog


def inspect_layout(
    layout: DestinationLayout,
    catalog: ArchitectureCatalog,
    library_patterns: tuple[str, ...] = DEFAULT_LIBRARY_PATTERNS,
) -> dict[str, Any]:
    errors: list[str] = []
    warnings: list[str] = []

    api_counts: dict[str, int] = {}
    for label, directory in (("core", layout.core_api), ("plugins", layout.plugin_api)):
        if not directory.is_dir():
            errors.append(f"missing API directory: {directory}")
            api_counts[label] = 0
            continue
        count = sum(1 for path in directory.glob("*.json") if path.is_file())
        api_counts[label] = count
        if count == 0:
            warnings.append(f"API directory is empty: {directory}")

    libraries: dict[str, list[str]] = {}
    for token in catalog.tokens:
        canonical = catalog.canonical_for(token)
        lib_dir = layout.lib_dir(canonical)
        matches: list[str] = []
        if lib_dir.is_dir():
            matches = sorted(
                path.name
                for path in lib_dir.glob("*")
                if path.is_file() and any(fnmatch.fnmatchcase(path.name, pattern) for pattern in library_patterns)
            )
        libraries[canonical] = matches
        if not matches:
            errors.append(f"no client library for architecture {token} in {lib_dir}")
        elif len(matches) > 1:
            warnings.append(f"multiple client libraries in {lib_dir}: {', '.join(matches)}")

    known = set(catalog.as_dict().values())
    if layout.lib_root.is_dir():
        for entry in sorted(layout.lib_root.iterdir()):
            if entry.is_dir() and entry.name not in known:
                warnings.append(f"unexpected architecture directory: {entry}")

    return {
        "root": str(layout.root),
        "api_counts": api_counts,
        "libraries": libraries,
        "errors": errors,
        "warnings": warnings,
        "status": "fail" if errors else "pass",
    }
