"""advisory-admin entry point.

Administrative tool for the security advisory database. Usage:
advisory-admin publish [--db PATH] PULL_REQUEST_ID | advisory-admin version.
"""

import argparse
import logging
import sys
from pathlib import Path

from advisory_admin import __version__
from advisory_admin.config import load_config
from advisory_admin.errors import AdminError
from advisory_admin.logging import AdminLogging
from advisory_admin.progress import StatusPrinter

PROG = "advisory-admin"


def _pull_request_id(value: str) -> int:
    """argparse type: positive integer pull request id."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"error parsing pull request ID number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"pull request ID number must be positive: {value!r}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with a required subcommand (publish | version)."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Administrative tool for the security advisory database",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    subparsers = parser.add_subparsers(dest="subcommand", metavar="COMMAND")
    subparsers.required = True

    publish_parser = subparsers.add_parser("publish", help="publish an advisory from a PR")
    publish_parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="advisory database git repo path (default: database.path from config, i.e. .)",
    )
    publish_parser.add_argument("pull_request_id", type=_pull_request_id, help="pull request ID number")

    subparsers.add_parser("version", help="display version information")
    return parser.parse_args(argv)


def run_publish(args: argparse.Namespace) -> int:
    """Run the publish subcommand; AdminError becomes a diagnostic and exit 1."""
    from advisory_admin.services.publish import publish

    try:
        config = load_config(args.config)
        AdminLogging(config.logging).setup()
        publish(args.db, args.pull_request_id, config, on_progress=StatusPrinter(sys.stdout))
    except AdminError as e:
        logging.getLogger("advisory_admin.main").debug("publish failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch to the subcommand and return the exit code."""
    args = parse_args(argv)

    if args.subcommand == "version":
        print(f"{PROG} {__version__}")
        return 0

    try:
        return run_publish(args)
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
