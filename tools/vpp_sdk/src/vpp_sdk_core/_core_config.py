from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import jsonschema

from ._core_base import ConfigurationError, load_json
from ._core_catalog import DEFAULT_ARCHITECTURES, DEFAULT_PACKAGES, ArchitectureCatalog

DEFAULT_CONFIG: dict[str, Any] = {
    "bindings": {
        "source_dir": "vpp-native-client-lib-sys",
        "output_dir": "vpp-api-client/gen",
        "api_subdir": "api",
        "ignored_versions": ["bin", "src"],
        "generator_command": ["cargo", "run", "--package", "vpp-api-gen", "--bin", "api-gen", "--"],
        "verbosity": 2,
    },
    "artifacts": {
        "architectures": [{"token": token, "canonical": canonical} for token, canonical in DEFAULT_ARCHITECTURES],
        "packages": DEFAULT_PACKAGES,
        "api_dir": "usr/share/vpp/api",
        "api_max_depth": 2,
        "library_dir": "usr/lib",
        "library_patterns": ["*vppapiclient*.so*", "libvppapiclient.so*"],
        "timeout_seconds": 120.0,
        "download_deadline_seconds": 1800.0,
        "retries": 0,
        "retry_backoff_seconds": 1.0,
    },
}


def get_schema_path(kind: str) -> Path:
    base = Path(__file__).resolve().parent / "schemas"
    mapping = {
        "config": base / "config.schema.json",
    }
    if kind not in mapping:
        raise ConfigurationError(f"Unknown schema kind: {kind}")
    return mapping[kind]


def validate_with_jsonschema(kind: str, payload: dict[str, Any]) -> None:
    schema_payload = load_json(get_schema_path(kind))
    try:
        jsonschema.validate(payload, schema_payload)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(item) for item in exc.absolute_path) or "<root>"
        raise ConfigurationError(f"{kind} failed JSON schema validation at '{location}': {exc.message}") from exc


def merge_config(overrides: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in overrides.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(copy.deepcopy(values))
        else:
            merged[section] = copy.deepcopy(values)
    return merged


def validate_config_payload(payload: dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ConfigurationError("config root must be an object")
    validate_with_jsonschema("config", payload)

    # Builds the catalog for its bijection checks.
    ArchitectureCatalog.from_config(payload["artifacts"])

    ignored = payload["bindings"]["ignored_versions"]
    if len(set(ignored)) != len(ignored):
        raise ConfigurationError("bindings.ignored_versions must not contain duplicates")


def load_config(path: Path | None) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if path is not None:
        overrides = load_json(path)
        if not isinstance(overrides, dict):
            raise ConfigurationError(f"JSON root in '{path}' must be an object")
    config = merge_config(overrides)
    validate_config_payload(config)
    return config
