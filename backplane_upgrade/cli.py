"""Command-line entry point for the backplane plugin."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as _dist_version

from .github import GitHubClient
from .upgrade import Upgrader

_log = logging.getLogger("backplane_upgrade")

_VERBOSITY_LEVELS = {
    "panic": logging.CRITICAL,
    "fatal": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}

_DESCRIPTION = (
    "This is a binary for backplane plugin. The current function ocm-backplane "
    "provides is to login a cluster, which get a proxy url from backplane for "
    "the target cluster. After login, users can use oc command to operate the "
    "target cluster"
)


def _version() -> str:
    try:
        return _dist_version("backplane_upgrade")
    except PackageNotFoundError:
        return "0.0.0"


def _run_version(args: argparse.Namespace) -> None:
    print(_version())


def _run_upgrade(args: argparse.Namespace) -> None:
    git = GitHubClient()
    try:
        git.check_connection()
    except (ConnectionError, ValueError) as exc:
        raise ConnectionError(f"checking connection to the git server: {exc}") from exc
    Upgrader(git).upgrade_plugin(_version())


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(prog="ocm-backplane", description=_DESCRIPTION)
    parser.add_argument(
        "-v",
        "--verbosity",
        type=str.lower,
        choices=list(_VERBOSITY_LEVELS),
        default="warning",
        help="Verbosity level: %(choices)s (default %(default)s)",
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>")

    upgrade = commands.add_parser(
        "upgrade",
        help="Upgrade the current backplane-cli to the latest version",
        description=(
            "Upgrades the latest version release based on "
            "your machine's OS and architecture."
        ),
    )
    upgrade.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    upgrade.set_defaults(handler=_run_upgrade)

    version = commands.add_parser(
        "version",
        help="Prints the version",
        description="Display the version of Backplane CLI",
    )
    version.set_defaults(handler=_run_version)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line; return the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(format="%(levelname)s %(message)s")
    _log.setLevel(_VERBOSITY_LEVELS[args.verbosity])

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(args)
    except Exception as exc:  # every failure ends the command with status 1
        _log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())