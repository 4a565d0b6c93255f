from __future__ import annotations

import argparse
import sys

from .core import VppSdkError
from .commands import command_check_layout, command_fetch, command_generate

FETCH_USAGE = "Usage: {prog} <vpp_version> <dest_folder> <distro> <distro_version>"
FETCH_EXAMPLE = "Example: {prog} 25.10-release /opt/vpp-sdk debian bookworm"
FETCH_POSITIONALS = ("vpp_version", "dest", "distro", "distro_version")


class FetchArgumentParser(argparse.ArgumentParser):
    """Reports usage errors with status 1, like a wrong positional count."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to a JSON config overriding the built-in defaults.")


def _add_jobs_argument(parser: argparse.ArgumentParser, unit: str) -> None:
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help=f"Number of {unit} processed concurrently (default: 1, sequential).",
    )


def _add_generate_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workspace-root",
        help="Workspace root (default: git top-level of the current directory, else the current directory).",
    )
    _add_config_argument(parser)
    _add_jobs_argument(parser, "versions")
    parser.add_argument("--report-json", help="Write a JSON summary of generated packages to path.")


def _add_fetch_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "positionals",
        nargs="*",
        metavar="ARG",
        help="<vpp_version> <dest_folder> <distro> <distro_version>",
    )
    _add_config_argument(parser)
    _add_jobs_argument(parser, "architectures")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for each connect or read while downloading (default: from config, 120).",
    )
    parser.add_argument("--retries", type=int, help="Extra download attempts after a failure (default: 0).")
    parser.add_argument("--report-json", help="Write a JSON summary of assembled artifacts to path.")


def _add_check_layout_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("dest", help="Root of an assembled SDK layout.")
    _add_config_argument(parser)
    parser.add_argument("--report-json", help="Write the layout report JSON to path.")
    parser.add_argument("--fail-on-warnings", action="store_true", help="Treat warnings as failures.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vpp_sdk",
        description="VPP client SDK build automation (binding generation and artifact fetch).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    generate = sub.add_parser("generate", help="Run api-gen for every API version in the workspace.")
    _add_generate_arguments(generate)
    generate.set_defaults(func=command_generate)

    fetch = sub.add_parser("fetch", help="Download VPP packages and assemble API JSON and client libraries.")
    _add_fetch_arguments(fetch)
    fetch.set_defaults(func=command_fetch)

    check_layout = sub.add_parser("check-layout", help="Verify an assembled SDK directory layout.")
    _add_check_layout_arguments(check_layout)
    check_layout.set_defaults(func=command_check_layout)

    return parser


def unpack_fetch_positionals(args: argparse.Namespace, prog: str) -> bool:
    positionals = list(getattr(args, "positionals", None) or [])
    if len(positionals) != len(FETCH_POSITIONALS):
        print(FETCH_USAGE.format(prog=prog))
        print(FETCH_EXAMPLE.format(prog=prog))
        return False
    for name, value in zip(FETCH_POSITIONALS, positionals):
        setattr(args, name, value)
    return True


def run_command(args: argparse.Namespace, prog: str) -> int:
    if args.func is command_fetch and not unpack_fetch_positionals(args, prog):
        return 1
    try:
        return int(args.func(args))
    except VppSdkError as exc:
        print(f"vpp_sdk error: {exc}", file=sys.stderr)
        return exc.exit_code


def build_fetch_parser(prog: str) -> FetchArgumentParser:
    parser = FetchArgumentParser(
        prog=prog,
        description="Download VPP packages for each architecture and assemble the SDK layout.",
    )
    _add_fetch_arguments(parser)
    return parser


def run_fetch(parser: argparse.ArgumentParser, argv: list[str]) -> int:
    # Options may sit between the four positionals.
    args = parser.parse_intermixed_args(argv)
    args.func = command_fetch
    return run_command(args, parser.prog)


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if argv[:1] == ["fetch"]:
        return run_fetch(build_fetch_parser(f"{parser.prog} fetch"), argv[1:])
    args = parser.parse_args(argv)
    return run_command(args, f"{parser.prog} {args.command}")


def main_generate(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="vpp-sdk-generate",
        description="Run api-gen for every API version found in the workspace.",
    )
    _add_generate_arguments(parser)
    args = parser.parse_args(argv)
    args.func = command_generate
    return run_command(args, parser.prog)


def main_fetch(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    return run_fetch(build_fetch_parser("vpp-sdk-fetch"), argv)


if __name__ == "__main__":
    raise SystemExit(main())
