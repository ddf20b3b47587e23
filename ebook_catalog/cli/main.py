"""Console-script entry point for ebook-catalog."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

from .args import parse_cli_args
from .commands import execute_import_command, execute_serve_command, execute_stats_command

_COMMANDS = {
    "import": execute_import_command,
    "stats": execute_stats_command,
    "serve": execute_serve_command,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ebook-catalog CLI."""

    args = parse_cli_args(argv)
    return _COMMANDS[args.command](args)


if __name__ == "__main__":  # pragma: no cover - manual execution
    sys.exit(main())
