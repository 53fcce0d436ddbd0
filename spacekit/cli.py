"""Entry point of the build task runner."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence

from .command import resolve_command


def _configure_logging() -> None:
    level = os.environ.get("BUILDIT_LOG", "WARNING").upper()
    try:
        logging.basicConfig(level=level)
    except ValueError:
        logging.basicConfig(level=logging.WARNING)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the requested build task; return the process exit code."""
    _configure_logging()
    command = resolve_command(argv)
    try:
        command.run()
    except Exception as error:  # every failure is reported the same way
        print(f"❌ {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())