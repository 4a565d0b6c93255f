from __future__ import annotations

import fnmatch
import tempfile
import threading
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

from ._core_base import LibraryNotFound, copy_file_atomic, print_warning
from ._core_catalog import ArchitectureCatalog, ReleaseCoordinates
from ._core_extract import ArchiveExtractor
from ._core_fetch import ArchiveFetcher
from ._core_scheduler import WorkUnit, raise_if_stopped, run_units

DEFAULT_API_DIR = "usr/share/vpp/api"
DEFAULT_LIBRARY_DIR = "usr/lib"
DEFAULT_LIBRARY_PATTERNS = ("*vppapiclient*.so*", "libvppapiclient.so*")

TempDirFactory = Callable[[str], AbstractContextManager[str]]


def default_temp_dir_factory(prefix: str) -> AbstractContextManager[str]:
    return tempfile.TemporaryDirectory(prefix=prefix)


@dataclass(frozen=True)
class DestinationLayout:
    root: Path

    @property
    def core_api(self) -> Path:
        return self.root / "api" / "core"

    @property
    def plugin_api(self) -> Path:
        return self.root / "api" / "plugins"

    @property
    def lib_root(self) -> Path:
        return self.root / "lib"

    def lib_dir(self, canonical: str) -> Path:
        return self.lib_root / canonical

    def api_dir_for(self, kind: str) -> Path:
        return self.core_api if kind == "base" else self.plugin_api

    def ensure(self) -> None:
        self.core_api.mkdir(parents=True, exist_ok=True)
        self.plugin_api.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class AssemblyOptions:
    api_dir: str = DEFAULT_API_DIR
    api_max_depth: int = 2
    library_dir: str = DEFAULT_LIBRARY_DIR
    library_patterns: tuple[str, ...] = DEFAULT_LIBRARY_PATTERNS

    @classmethod
    def from_config(cls, section: dict[str, Any]) -> "AssemblyOptions":
        return cls(
            api_dir=str(section["api_dir"]),
            api_max_depth=int(section["api_max_depth"]),
            library_dir=str(section["library_dir"]),
            library_patterns=tuple(str(item) for item in section["library_patterns"]),
        )


def iter_api_json_files(api_dir: Path, max_depth: int = 2) -> Iterator[Path]:
    for path in sorted(api_dir.rglob("*.json")):
        if len(path.relative_to(api_dir).parts) > max_depth:
            continue
        if path.is_file():
            yield path


def find_library(search_root: Path, patterns: tuple[str, ...] | list[str]) -> Path | None:
    if not search_root.is_dir():
        return None
    for path in sorted(search_root.rglob("*")):
        if path.is_symlink() or not path.is_file():
            continue
        if any(fnmatch.fnmatchcase(path.name, pattern) for pattern in patterns):
            return path
    return None


@dataclass
class ArtifactAssembler:
    catalog: ArchitectureCatalog
    coordinates: ReleaseCoordinates
    layout: DestinationLayout
    fetcher: ArchiveFetcher
    extractor: ArchiveExtractor
    options: AssemblyOptions = field(default_factory=AssemblyOptions)
    temp_dir_factory: TempDirFactory = default_temp_dir_factory

    def _fetch_and_extract(
        self,
        kind: str,
        token: str,
        workdir: Path,
        stop: threading.Event | None = None,
    ) -> tuple[Path, str, str]:
        spec = self.catalog.package(kind)
        name = spec.package_name(self.coordinates, token)
        url = spec.package_url(self.coordinates, token)
        raise_if_stopped(stop, token, f"downloading the {kind} package")
        print(f"[{token}] downloading {kind} package: {url}")
        archive = self.fetcher.fetch(url, workdir / kind / name, stop=stop)
        extract_dir = workdir / kind / "extract"
        raise_if_stopped(stop, token, f"extracting {name}")
        print(f"[{token}] extracting {name} into {extract_dir}")
        self.extractor.extract(archive, extract_dir)
        return extract_dir, name, url

    def _copy_api_json(
        self,
        kind: str,
        token: str,
        extract_dir: Path,
        package_name: str,
        warnings: list[str],
        stop: threading.Event | None = None,
    ) -> list[str]:
        api_src = extract_dir / self.options.api_dir
        destination = self.layout.api_dir_for(kind)
        if not api_src.is_dir():
            message = f"API directory not found in {package_name}"
            warnings.append(message)
            print_warning(token, message)
            return []
        print(f"[{token}] copying {kind} API JSON files -> {destination}")
        copied = []
        for path in iter_api_json_files(api_src, self.options.api_max_depth):
            raise_if_stopped(stop, token, f"copying {path.name}")
            copied.append(copy_file_atomic(path, destination).name)
        return sorted(copied)

    def assemble_architecture(self, token: str, stop: threading.Event | None = None) -> dict[str, Any]:
        canonical = self.catalog.canonical_for(token)
        print(f"=== Processing arch: {token} -> {canonical} ===")
        warnings: list[str] = []
        result: dict[str, Any] = {
            "architecture": token,
            "canonical": canonical,
            "packages": {},
            "api_files": {},
            "library": None,
            "warnings": warnings,
        }

        with self.temp_dir_factory(f"vpp_sdk_{token}_") as temp_name:
            workdir = Path(temp_name)

            extract_dir, name, url = self._fetch_and_extract("base", token, workdir, stop)
            result["packages"]["base"] = {"name": name, "url": url}
            result["api_files"]["core"] = self._copy_api_json("base", token, extract_dir, name, warnings, stop)

            library = find_library(extract_dir / self.options.library_dir, self.options.library_patterns)
            if library is None:
                raise LibraryNotFound(f"vppapiclient shared library not found for architecture {token}")
            raise_if_stopped(stop, token, "copying the client library")
            copied_library = copy_file_atomic(library, self.layout.lib_dir(canonical))
            print(f"[{token}] copied client library -> {copied_library}")
            result["library"] = str(copied_library)

            extract_dir, name, url = self._fetch_and_extract("plugin", token, workdir, stop)
            result["packages"]["plugin"] = {"name": name, "url": url}
            result["api_files"]["plugins"] = self._copy_api_json("plugin", token, extract_dir, name, warnings, stop)

        return result

    def run(self, jobs: int = 1) -> list[dict[str, Any]]:
        self.layout.ensure()
        units = [
            WorkUnit(name=token, run=lambda stop, token=token: self.assemble_architecture(token, stop))
            for token in self.catalog.tokens
        ]
        return run_units(units, jobs=jobs)
