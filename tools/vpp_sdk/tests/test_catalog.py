from __future__ import annotations

import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from vpp_sdk_core.core import (  # noqa: E402
    ArchitectureCatalog,
    ConfigurationError,
    ReleaseCoordinates,
    UnknownArchitecture,
    default_catalog,
)


class ArchitectureCatalogTests(unittest.TestCase):
    def test_default_mapping_is_injective_and_total(self) -> None:
        catalog = default_catalog()
        self.assertEqual(catalog.tokens, ("amd64", "arm64"))
        canonical = [catalog.canonical_for(token) for token in catalog.tokens]
        self.assertEqual(canonical, ["x86_64", "aarch64"])
        self.assertEqual(len(set(canonical)), len(canonical))

    def test_unknown_token_raises(self) -> None:
        with self.assertRaises(UnknownArchitecture) as ctx:
            default_catalog().canonical_for("riscv64")
        self.assertIn("riscv64", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ConfigurationError)

    def test_rejects_duplicate_canonical(self) -> None:
        with self.assertRaises(ConfigurationError):
            ArchitectureCatalog([("amd64", "x86_64"), ("x64", "x86_64")])

    def test_rejects_duplicate_token(self) -> None:
        with self.assertRaises(ConfigurationError):
            ArchitectureCatalog([("amd64", "x86_64"), ("amd64", "aarch64")])

    def test_rejects_empty_catalog(self) -> None:
        with self.assertRaises(ConfigurationError):
            ArchitectureCatalog([])

    def test_renders_package_names_and_urls(self) -> None:
        catalog = default_catalog()
        coordinates = ReleaseCoordinates(release="25.10-release", distro="debian", distro_version="bookworm")

        base = catalog.package("base")
        plugin = catalog.package("plugin")
        self.assertEqual(base.package_name(coordinates, "arm64"), "vpp_25.10-release_arm64.deb")
        self.assertEqual(plugin.package_name(coordinates, "amd64"), "vpp-plugin-core_25.10-release_amd64.deb")
        self.assertEqual(
            base.package_url(coordinates, "amd64"),
            "https://packagecloud.io/fdio/release/packages/debian/bookworm/vpp_25.10-release_amd64.deb/download.deb",
        )

    def test_from_config_keeps_order(self) -> None:
        catalog = ArchitectureCatalog.from_config(
            {
                "architectures": [
                    {"token": "arm64", "canonical": "aarch64"},
                    {"token": "amd64", "canonical": "x86_64"},
                ],
                "packages": {
                    "base": {"name": "core_{arch}.deb", "url": "https://example.test/{name}"},
                    "plugin": {"name": "plugins_{arch}.deb", "url": "https://example.test/{name}"},
                },
            }
        )
        self.assertEqual(catalog.tokens, ("arm64", "amd64"))
        self.assertEqual(catalog.as_dict(), {"arm64": "aarch64", "amd64": "x86_64"})


if __name__ == "__main__":
    unittest.main()
