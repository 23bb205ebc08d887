"""
Chronicle CLI

Command-line interface for Keep a Changelog files.

Usage:
    # Print the changelog as markdown or as a plain listing
    chronicle show CHANGELOG.md
    chronicle show CHANGELOG.md --format text

    # List versions and inspect one
    chronicle versions CHANGELOG.md
    chronicle get CHANGELOG.md 1.2.0

    # Start a new changelog
    chronicle init CHANGELOG.md

    # Add a version, then changes
    chronicle add-version CHANGELOG.md 1.3.0 --date 2025-01-01
    chronicle add-change CHANGELOG.md 1.3.0 --added "New feature" --fixed "A bug"

    # Serve the REST API
    chronicle serve CHANGELOG.md --port 8430
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from chronicle.changelog.change import ChangeSet
from chronicle.changelog.document import Changelog
from chronicle.changelog.taxonomy import Category
from chronicle.core.exceptions import ChangelogError
from chronicle.loaders.base import LoaderError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def show(args: argparse.Namespace) -> None:
    """Print the whole changelog"""
    changelog = Changelog.load(args.path)
    if args.format == "text":
        print(changelog.to_text())
    else:
        print(changelog.render(), end="")


def list_versions(args: argparse.Namespace) -> None:
    """List versions in file order"""
    changelog = Changelog.load(args.path)
    for version in changelog.get_versions():
        print(version)


def get_version(args: argparse.Namespace) -> None:
    """Print one version as JSON"""
    changelog = Changelog.load(args.path)
    block = changelog.require_version(args.version)
    print(json.dumps(block.to_dict(), indent=2))


def init_changelog(args: argparse.Namespace) -> None:
    """Write a new changelog with the standard title and description"""
    if args.path.exists() and not args.force:
        print(f"Error: {args.path} already exists (use --force to overwrite)", file=sys.stderr)
        sys.exit(1)

    changelog = Changelog()
    changelog.init()
    changelog.save(args.path)
    print(f"✓ Created {args.path}")


def add_version(args: argparse.Namespace) -> None:
    """Add an empty version on top"""
    changelog = Changelog.load(args.path)
    block = changelog.add_version(args.version, date=args.date)
    changelog.save(args.path)
    print(f"✓ Added {block.identifier.format('plain')} to {args.path}")


def add_change(args: argparse.Namespace) -> None:
    """Add categorized changes to a version, creating it if needed"""
    change_set = ChangeSet.from_dict({"version": args.version, "date": args.date})
    for category in Category:
        values = getattr(args, category.key)
        if values:
            change_set.add(category, values)

    if not any(change_set.entries.values()):
        print("Error: at least one change is required", file=sys.stderr)
        sys.exit(1)

    changelog = Changelog.load(args.path)
    block = changelog.add_change(change_set)
    changelog.save(args.path)
    print(f"✓ Updated {block.ver} in {args.path}")


def serve(args: argparse.Namespace) -> None:
    """Serve the REST API for one changelog file"""
    from chronicle.app import run_server

    run_server(args.path, host=args.host, port=args.port)


COMMANDS = {
    "show": show,
    "versions": list_versions,
    "get": get_version,
    "init": init_changelog,
    "add-version": add_version,
    "add-change": add_change,
    "serve": serve,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronicle",
        description="Keep a Changelog CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    show_parser = subparsers.add_parser("show", help="Print the changelog")
    show_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")
    show_parser.add_argument(
        "--format", choices=["markdown", "text"], default="markdown", help="Output format"
    )

    versions_parser = subparsers.add_parser("versions", help="List versions")
    versions_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")

    get_parser = subparsers.add_parser("get", help="Show one version as JSON")
    get_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")
    get_parser.add_argument("version", help="Version, e.g. 1.2.0")

    init_parser = subparsers.add_parser("init", help="Create a new changelog")
    init_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    version_parser = subparsers.add_parser("add-version", help="Add a version on top")
    version_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")
    version_parser.add_argument("version", help="Version, e.g. 1.2.0")
    version_parser.add_argument("--date", help="Release date YYYY-MM-DD (default: today)")

    change_parser = subparsers.add_parser("add-change", help="Add changes to a version")
    change_parser.add_argument("path", type=Path, help="Path to CHANGELOG.md")
    change_parser.add_argument("version", help="Version, e.g. 1.2.0")
    change_parser.add_argument("--date", help="Release date if the version is new")
    for category in Category:
        change_parser.add_argument(
            f"--{category.key}",
            action="append",
            metavar="TEXT",
            help=f"{category.value} entry (repeatable)",
        )

    serve_parser = subparsers.add_parser("serve", help="Serve the REST API")
    serve_parser.add_argument("path", type=Path, nargs="?", help="Path to CHANGELOG.md")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8430, help="Port number")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        COMMANDS[args.command](args)
    except (ChangelogError, LoaderError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
