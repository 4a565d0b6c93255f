from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ._core_base import ConfigurationError, UnknownArchitecture, render_template

PACKAGE_KINDS = ("base", "plugin")

DEFAULT_ARCHITECTURES: tuple[tuple[str, str], ...] = (
    ("amd64", "x86_64"),
    ("arm64", "aarch64"),
)

DEFAULT_PACKAGE_URL = (
    "https://packagecloud.io/fdio/release/packages/{distro}/{distro_version}/{name}/download.deb"
)

DEFAULT_PACKAGES: dict[str, dict[str, str]] = {
    "base": {
        "name": "vpp_{release}_{arch}.deb",
        "url": DEFAULT_PACKAGE_URL,
    },
    "plugin": {
        "name": "vpp-plugin-core_{release}_{arch}.deb",
        "url": DEFAULT_PACKAGE_URL,
    },
}


@dataclass(frozen=True)
class ReleaseCoordinates:
    release: str
    distro: str
    distro_version: str

    def as_dict(self) -> dict[str, str]:
        return {
            "release": self.release,
            "distro": self.distro,
            "distro_version": self.distro_version,
        }


@dataclass(frozen=True)
class PackageSpec:
    kind: str
    name_template: str
    url_template: str

    def _replacements(self, coordinates: ReleaseCoordinates, token: str) -> dict[str, str]:
        values = coordinates.as_dict()
        values["arch"] = token
        return values

    def package_name(self, coordinates: ReleaseCoordinates, token: str) -> str:
        return render_template(self.name_template, self._replacements(coordinates, token))

    def package_url(self, coordinates: ReleaseCoordinates, token: str) -> str:
        values = self._replacements(coordinates, token)
        values["name"] = self.package_name(coordinates, token)
        return render_template(self.url_template, values)


class ArchitectureCatalog:
    """Total mapping from package architecture tokens to layout directory names.

    The mapping is checked to be a bijection when the catalog is built, and the
    processing order is the order the entries were given in.
    """

    def __init__(
        self,
        entries: list[tuple[str, str]] | tuple[tuple[str, str], ...],
        packages: dict[str, PackageSpec] | None = None,
    ) -> None:
        if not entries:
            raise ConfigurationError("architecture catalog must contain at least one entry")
        mapping: dict[str, str] = {}
        seen_canonical: set[str] = set()
        for token, canonical in entries:
            if not isinstance(token, str) or not token:
                raise ConfigurationError("architecture tokens must be non-empty strings")
            if not isinstance(canonical, str) or not canonical:
                raise ConfigurationError(f"architecture '{token}' must map to a non-empty name")
            if token in mapping:
                raise ConfigurationError(f"duplicate architecture token '{token}'")
            if canonical in seen_canonical:
                raise ConfigurationError(
                    f"canonical architecture '{canonical}' is mapped by more than one token"
                )
            mapping[token] = canonical
            seen_canonical.add(canonical)
        self._mapping = mapping
        self._order = tuple(token for token, _ in entries)

        if packages is None:
            packages = {
                kind: PackageSpec(kind=kind, name_template=spec["name"], url_template=spec["url"])
                for kind, spec in DEFAULT_PACKAGES.items()
            }
        missing = [kind for kind in PACKAGE_KINDS if kind not in packages]
        if missing:
            raise ConfigurationError(f"package specs missing for kinds: {', '.join(missing)}")
        self._packages = dict(packages)

    @classmethod
    def from_config(cls, section: dict[str, Any]) -> "ArchitectureCatalog":
        raw_entries = section.get("architectures")
        if not isinstance(raw_entries, list):
            raise ConfigurationError("artifacts.architectures must be an array")
        entries = [(str(item.get("token")), str(item.get("canonical"))) for item in raw_entries]
        raw_packages = section.get("packages") or {}
        packages = {
            kind: PackageSpec(kind=kind, name_template=spec["name"], url_template=spec["url"])
            for kind, spec in raw_packages.items()
        }
        return cls(entries, packages)

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._order

    def canonical_for(self, token: str) -> str:
        try:
            return self._mapping[token]
        except KeyError:
            known = ", ".join(self._order)
            raise UnknownArchitecture(f"Unknown architecture '{token}'. Known architectures: {known}") from None

    def package(self, kind: str) -> PackageSpec:
        spec = self._packages.get(kind)
        if spec is None:
            raise ConfigurationError(f"Unknown package kind '{kind}'")
        return spec

    def as_dict(self) -> dict[str, str]:
        return {token: self._mapping[token] for token in self._order}


def default_catalog() -> ArchitectureCatalog:
    return ArchitectureCatalog(DEFAULT_ARCHITECTURES)
