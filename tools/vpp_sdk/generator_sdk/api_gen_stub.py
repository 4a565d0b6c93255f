#!/usr/bin/env python3
"""Stand-in for ``api-gen`` that honours its command-line contract.

It records the invocation in ``<package-path>/<package-name>/invocation.json``
and writes a ``src/lib.rs`` listing the API JSON files it was given. A file
named ``FAIL`` inside the input tree makes it exit with status 3.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="api-gen")
    parser.add_argument("-i", "--in-file", required=True)
    parser.add_argument("-o", "--out-file", default="dummy.rs")
    parser.add_argument("-p", "--parse-type", default="File", choices=["File", "Tree", "ApiType", "ApiMessage"])
    parser.add_argument("--package-name", default="someVPP")
    parser.add_argument("--package-path", default="../")
    parser.add_argument("--print-message-names", action="store_true")
    parser.add_argument("--create-binding", action="store_true")
    parser.add_argument("--create-package", action="store_true")
    parser.add_argument("--generate-code", action="store_true")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv[1:])
    in_path = Path(args.in_file).resolve()
    if not in_path.is_dir():
        print(f"API tree not found: {in_path}", file=sys.stderr)
        return 2
    if (in_path / "FAIL").exists():
        print(f"refusing to generate bindings for {in_path}", file=sys.stderr)
        return 3

    api_files = sorted(path.name for path in in_path.rglob("*.json"))
    package_dir = Path(args.package_path).resolve() / args.package_name
    (package_dir / "src").mkdir(parents=True, exist_ok=True)
    (package_dir / "src" / "lib.rs").write_text(
        "".join(f"// {name}\n" for name in api_files),
        encoding="utf-8",
    )
    record = {
        "in_file": str(in_path),
        "out_file": args.out_file,
        "parse_type": args.parse_type,
        "package_name": args.package_name,
        "package_path": args.package_path,
        "print_message_names": args.print_message_names,
        "create_binding": args.create_binding,
        "create_package": args.create_package,
        "generate_code": args.generate_code,
        "verbose": args.verbose,
        "cwd": str(Path.cwd()),
        "api_files": api_files,
    }
    (package_dir / "invocation.json").write_text(json.dumps(record, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    if args.print_message_names:
        for name in api_files:
            print(name)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
