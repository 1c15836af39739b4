"""Command-line entry point for project setup, binding and forking."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from arbiter.bind.forge import forge_bind
from arbiter.errors import ArbiterError
from arbiter.fork.config import load_fork_config
from arbiter.init import init_project, remove_git

VERSION = "0.4.13"


def build_parser() -> argparse.ArgumentParser:
    """Return the parser for the ``arbiter`` command."""
    parser = argparse.ArgumentParser(
        prog="Arbiter",
        description="Ethereum Virtual Machine Logic Simulator",
    )
    parser.add_argument("--version", action="version", version=f"Arbiter {VERSION}")
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("bind", help="Generate contract bindings.")

    init = commands.add_parser("init", help="Initialize a new project.")
    init.add_argument("simulation_name", help="Name of the project to create.")
    init.add_argument(
        "--no-git", action="store_true", help="Remove the template's git history."
    )

    fork = commands.add_parser("fork", help="Copy contract state from a live chain.")
    fork.add_argument("fork_config_path", help="Config file describing the fork.")
    fork.add_argument(
        "--overwrite", action="store_true", help="Replace an existing output file."
    )
    return parser


def _run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    match args.command:
        case "init":
            print("Initializing Arbiter project...")
            init_project(args.simulation_name)
            if args.no_git:
                remove_git()
        case "bind":
            print("Generating bindings...")
            forge_bind()
        case "fork":
            print("Forking...")
            fork_config = load_fork_config(args.fork_config_path)
            fork_config.write_to_disk(overwrite=args.overwrite)
        case _:
            parser.print_help()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        _run(args, parser)
    except (ArbiterError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())