from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import load_config_from_args, resolve_jobs, write_report_if_requested


def build_assembler(
    args: argparse.Namespace,
    config: dict[str, Any],
    fetcher: ArchiveFetcher | None = None,
    extractor: ArchiveExtractor | None = None,
) -> ArtifactAssembler:
    artifacts = config["artifacts"]
    timeout = args.timeout if getattr(args, "timeout", None) is not None else float(artifacts["timeout_seconds"])
    retries = args.retries if getattr(args, "retries", None) is not None else int(artifacts["retries"])
    if timeout <= 0:
        raise ConfigurationError("--timeout must be positive")
    if retries < 0:
        raise ConfigurationError("--retries must not be negative")

    return ArtifactAssembler(
        catalog=ArchitectureCatalog.from_config(artifacts),
        coordinates=ReleaseCoordinates(
            release=args.vpp_version,
            distro=args.distro,
            distro_version=args.distro_version,
        ),
        layout=DestinationLayout(Path(args.dest).resolve()),
        fetcher=fetcher or ArchiveFetcher(
            timeout=timeout,
            retries=retries,
            backoff_seconds=float(artifacts["retry_backoff_seconds"]),
            deadline_seconds=float(artifacts["download_deadline_seconds"]),
        ),
        extractor=extractor or ArchiveExtractor(),
        options=AssemblyOptions.from_config(artifacts),
    )


def command_fetch(args: argparse.Namespace) -> int:
    config = load_config_from_args(args)
    assembler = build_assembler(args, config)
    results = assembler.run(jobs=resolve_jobs(args))

    layout = assembler.layout
    canonical_names = ",".join(assembler.catalog.canonical_for(token) for token in assembler.catalog.tokens)
    print("")
    print("=== Completed ===")
    print(f"Core API        -> {layout.core_api}")
    print(f"Plugin API      -> {layout.plugin_api}")
    print(f"Libraries under -> {layout.lib_root}/{{{canonical_names}}}")

    write_report_if_requested(
        args,
        {
            "generated_at_utc": utc_timestamp_now(),
            "release": assembler.coordinates.as_dict(),
            "destination": {
                "core_api": str(layout.core_api),
                "plugin_api": str(layout.plugin_api),
                "lib_root": str(layout.lib_root),
            },
            "results": {item["architecture"]: item for item in results},
            "warning_count": sum(len(item["warnings"]) for item in results),
        },
    )
    return 0


def command_check_layout(args: argparse.Namespace) -> int:
    config = load_config_from_args(args)
    artifacts = config["artifacts"]
    report = inspect_layout(
        DestinationLayout(Path(args.dest).resolve()),
        ArchitectureCatalog.from_config(artifacts),
        tuple(artifacts["library_patterns"]),
    )

    counts = report["api_counts"]
    print(f"[layout] api/core={counts['core']} api/plugins={counts['plugins']}")
    for canonical, names in report["libraries"].items():
        print(f"[layout] lib/{canonical}: {', '.join(names) if names else '<none>'}")
    for item in report["warnings"]:
        print("  warning: " + item)
    for item in report["errors"]:
        print("  error: " + item)

    write_report_if_requested(args, dict(report, generated_at_utc=utc_timestamp_now()))

    if report["errors"]:
        return 1
    if bool(getattr(args, "fail_on_warnings", False)) and report["warnings"]:
        return 1
    return 0
