"""Assetwatch CLI — assetwatch groups / assetwatch watch.

Entry point for the ``assetwatch`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the assetwatch CLI."""
    parser = argparse.ArgumentParser(
        prog="assetwatch",
        description="Detect changed scripts and stylesheets and invalidate cached builds.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # assetwatch groups
    groups_parser = subparsers.add_parser(
        "groups",
        help="List groups and their resources",
    )
    groups_parser.add_argument("root", nargs="?", default=".", help="Asset root directory")
    groups_parser.add_argument("--model", default=None, help="Groups file (YAML)")

    # assetwatch watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch the asset root and report invalidated groups",
    )
    watch_parser.add_argument("root", nargs="?", default=".", help="Asset root directory")
    watch_parser.add_argument("--model", default=None, help="Groups file (YAML)")
    watch_parser.add_argument(
        "--hash", dest="hash_algorithm", default=None, help="Digest algorithm (sha1, md5, crc32...)",
    )
    watch_parser.add_argument(
        "--verbose", action="store_true", help="Print per-check timing and errors",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from assetwatch import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from assetwatch.app import list_groups, watch

    if args.command == "groups":
        sys.exit(list_groups(args.root, model_file=args.model))
    elif args.command == "watch":
        sys.exit(
            watch(
                args.root,
                model_file=args.model,
                hash_algorithm=args.hash_algorithm,
                verbose=args.verbose,
            )
        )


if __name__ == "__main__":
    main()
