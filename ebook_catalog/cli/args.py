"""Argument parsing helpers for the ebook-catalog CLI."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def _add_shared_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    parser.add_argument(
        "--config",
        default=None,
        help=(
            "Path to a configuration override JSON file (defaults to conf/config.local.json "
            "if present)."
        ),
    )
    parser.add_argument("--library-root", help="Override the library root directory.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging output.")
    return parser


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ebook-catalog",
        description="Browse and maintain a filesystem-backed e-book catalog.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import",
        help="Import PDF/EPUB files from a folder into the library.",
    )
    _add_shared_arguments(import_parser)
    import_parser.add_argument(
        "path",
        help="Absolute or relative path to a directory containing PDFs/EPUBs.",
    )
    import_parser.add_argument(
        "--no-copy",
        dest="copy",
        action="store_false",
        help="Only register the original paths instead of copying into the library.",
    )
    import_parser.add_argument(
        "--no-database",
        dest="database",
        action="store_false",
        help="Skip recording imported files in the books table.",
    )

    stats_parser = subparsers.add_parser(
        "stats",
        help="Print aggregate statistics for the catalog as JSON.",
    )
    _add_shared_arguments(stats_parser)

    subparsers.add_parser(
        "serve",
        help="Run the HTTP API with uvicorn (remaining flags go to the server runner).",
        add_help=False,
    )

    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse ``argv``; unknown flags are only accepted for ``serve``."""

    parser = build_cli_parser()
    args, extras = parser.parse_known_args(argv)
    if args.command != "serve" and extras:
        parser.error(f"unrecognized arguments: {' '.join(extras)}")
    args.server_args = extras
    return args


__all__ = ["build_cli_parser", "parse_cli_args"]
