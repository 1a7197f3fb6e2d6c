from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from kubelogtail.errors import InvalidModeError
from kubelogtail.logging import get_console

COLOR_MODES = ("off", "line", "pod")
PALETTE = ("blue", "cyan", "yellow", "red", "magenta")


@dataclass(frozen=True)
class Printer:
    """Renders ``label line`` to the console in one fixed style."""

    console: Console
    style: Optional[str] = None
    whole_line: bool = False

    def __call__(self, label: str, line: str) -> None:
        if self.style is None:
            text = Text(f"{label} {line}")
        elif self.whole_line:
            text = Text(f"{label} {line}", style=self.style)
        else:
            text = Text.assemble((label, self.style), " ", line)
        self.console.print(text, soft_wrap=True, highlight=False)


class ColorAssigner:
    """Hands out printers round-robin, one per tail.

    The cursor is the only state shared between tail threads; it is advanced
    under a lock so concurrent tail starts get consecutive palette entries.
    """

    def __init__(self, mode: str, console: Console | None = None):
        mode = mode or "line"
        if mode not in COLOR_MODES:
            raise InvalidModeError(f"unknown color print mode: \"{mode}\"")
        self.mode = mode
        self.console = console or get_console()
        self._lock = threading.Lock()
        self._cursor = 0
        self._printers = self._build_printers()

    def _build_printers(self) -> List[Printer]:
        if self.mode == "off":
            return [Printer(console=self.console)]
        whole_line = self.mode == "line"
        return [
            Printer(console=self.console, style=color, whole_line=whole_line)
            for color in PALETTE
        ]

    @property
    def palette_size(self) -> int:
        return len(self._printers)

    def get_function(self) -> Printer:
        with self._lock:
            printer = self._printers[self._cursor]
            self._cursor = (self._cursor + 1) % len(self._printers)
        return printer
