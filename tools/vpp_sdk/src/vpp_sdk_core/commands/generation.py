from __future__ import annotations

import argparse

from ..core import *  # noqa: F401,F403
from .common import load_config_from_args, resolve_jobs, write_report_if_requested


def command_generate(args: argparse.Namespace) -> int:
    config = load_config_from_args(args)
    bindings = config["bindings"]

    if getattr(args, "workspace_root", None):
        workspace_root = Path(args.workspace_root).resolve()
    else:
        workspace_root = resolve_workspace_root(Path.cwd())

    sys_root = ensure_relative_path(workspace_root, bindings["source_dir"]).resolve()
    dest = ensure_relative_path(workspace_root, bindings["output_dir"]).resolve()

    driver = BindingGenerationDriver(
        sys_root=sys_root,
        dest=dest,
        invoker=CodeGeneratorInvoker(bindings["generator_command"], cwd=workspace_root),
        ignored=frozenset(bindings["ignored_versions"]),
        api_subdir=bindings["api_subdir"],
        verbosity=int(bindings["verbosity"]),
    )
    results = driver.run(jobs=resolve_jobs(args))

    print(f"Generated {len(results)} binding package(s) under {dest}")
    write_report_if_requested(
        args,
        {
            "generated_at_utc": utc_timestamp_now(),
            "workspace_root": str(workspace_root),
            "source_dir": str(sys_root),
            "output_dir": str(dest),
            "results": {item["version"]: item for item in results},
        },
    )
    return 0
