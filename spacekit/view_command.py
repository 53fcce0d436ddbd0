"""The command that analyses disk space and shows it as a tree."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path

from .environment import EnvService
from .skin import Skin, low_color_skin

COLORTERM_ENV_VAR = "COLORTERM"
TERM_ENV_VAR = "TERM"

_COLOR_COUNTS: dict[str, int | None] = {
    "truecolor": 16_777_216,
    "24bit": 16_777_216,
    "24-bit": 16_777_216,
    "kitty": 256,
    "kitty-256color": 256,
    "konsole": 256,
    "rxvt-unicode-256color": 256,
    "screen-256color": 256,
    "tmux-256color": 256,
    "xterm-256color": 256,
    "xterm256": 256,
    "ansi": 16,
    "screen": 16,
    "tmux": 16,
    "xterm": 16,
    "rxvt-unicode": 8,
    "dumb": None,
    "monochrome": None,
}


class CommandError(Exception):
    """Raised when a command cannot be prepared or run."""


class ViewCommand:
    """Analyses the space used below one or more paths and presents it."""

    def __init__(
        self,
        target_paths: Iterable[str | Path] | None = None,
        size_display_format: object | None = None,
        size_threshold_percentage: int = 1,
        non_interactive: bool = False,
        env_service: EnvService | None = None,
        should_exit: threading.Event | None = None,
    ) -> None:
        self.target_paths = None if target_paths is None else [Path(p) for p in target_paths]
        self.size_display_format = size_display_format
        self.size_threshold_percentage = size_threshold_percentage
        self.non_interactive = non_interactive
        self.total_size_in_bytes = 0
        self.env_service = env_service if env_service is not None else EnvService()
        self.should_exit = should_exit if should_exit is not None else threading.Event()

    def prepare(self) -> ViewCommand:
        """Sort, deduplicate and validate the target paths, defaulting to the working directory."""
        if self.target_paths:
            cleaned = sorted(set(self.target_paths))
            for target_path in cleaned:
                if not target_path.exists():
                    raise CommandError(f"{target_path} does not exist!")
            self.target_paths = cleaned
        else:
            self.target_paths = [self.env_service.current_dir()]
        return self

    def select_skin(self) -> Skin:
        """Choose the full-colour skin only for terminals with more than 256 colours."""
        color_count = self.get_color_count()
        if color_count is None or color_count <= 256:
            return low_color_skin()
        return Skin()

    def get_color_count(self) -> int | None:
        """Guess the number of colours the terminal supports from COLORTERM or TERM."""
        terminal = self.env_service.var(COLORTERM_ENV_VAR) or self.env_service.var(TERM_ENV_VAR)
        if not terminal:
            return None
        return _COLOR_COUNTS.get(terminal.lower())