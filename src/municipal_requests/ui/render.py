"""Output rendering for the municipal-requests CLI.

Plain text is the default and is what pipes, files and tests see. When
stdout is a terminal and neither ``NO_COLOR`` nor ``--no-color`` is set, the
same calls render through ``rich``: styled headings and boxed tables.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Sequence


def color_allowed(no_color_flag: bool) -> bool:
    """True when rich styling should be used for stdout."""

    if no_color_flag or os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def plain_table(headers: Sequence[str], rows: Sequence[Sequence[object]]) -> list[str]:
    """Left-aligned columns separated by two spaces, with a dashed rule under the header."""

    grid = [[str(cell) for cell in headers]]
    grid.extend([str(cell) for cell in row] for row in rows)
    widths = [max(len(line[column]) for line in grid) for column in range(len(headers))]

    lines = [
        "  ".join(cell.ljust(width) for cell, width in zip(line, widths)).rstrip()
        for line in grid
    ]
    lines.insert(1, "  ".join("-" * width for width in widths))
    return lines


class CLIRenderer:
    """Writes human-readable command output to stdout."""

    def __init__(self, *, no_color: bool = False, verbose: bool = False) -> None:
        self.verbose = verbose
        self._console = Console(highlight=False) if color_allowed(no_color) else None

    @property
    def uses_color(self) -> bool:
        return self._console is not None

    def heading(self, text: str) -> None:
        self._emit(text, style="bold")

    def kv(self, key: str, value: object) -> None:
        if self._console is None:
            print(f"{key}: {value}")
            return
        self._console.print(Text.assemble((f"{key}: ", "bold"), str(value)))

    def text(self, line: str) -> None:
        self._emit(line)

    def section(self, title: str) -> None:
        """Blank line, then ``title`` as a heading."""

        self._emit("")
        self.heading(title)

    def warning(self, text: str) -> None:
        self._emit(f"Warning: {text}", style="yellow")

    def items(self, entries: Sequence[str]) -> None:
        for entry in entries:
            self._emit(f"  - {entry}")

    def table(self, headers: Sequence[str], rows: Sequence[Sequence[object]]) -> None:
        """Render ``rows`` under ``headers``; nothing is printed for zero rows."""

        if not rows:
            return
        if self._console is None:
            for line in plain_table(headers, rows):
                print(line)
            return

        grid = Table(box=box.SIMPLE_HEAD, header_style="bold")
        for header in headers:
            grid.add_column(header)
        for row in rows:
            grid.add_row(*(str(cell) for cell in row))
        self._console.print(grid)

    def _emit(self, line: str, *, style: str | None = None) -> None:
        if self._console is None:
            print(line)
        else:
            self._console.print(Text(line, style=style or ""))


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "color_allowed", "create_renderer", "plain_table"]
