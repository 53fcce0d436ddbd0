"""Access to the process environment behind a small replaceable service."""

from __future__ import annotations

import os
from pathlib import Path


class EnvService:
    """Reads environment variables and the working directory of the process."""

    def var(self, key: str) -> str | None:
        """Return the value of the environment variable ``key``, or None if it is unset."""
        return os.environ.get(key)

    def current_dir(self) -> Path:
        """Return the current working directory."""
        return Path.cwd()