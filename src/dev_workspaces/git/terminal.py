"""Status output on stderr for one clone operation.

Each clone owns its own Terminal; whether the current line needs clearing is
instance state, not process-wide.
"""

from __future__ import annotations

import shutil
import sys
from typing import TextIO

ERASE_LINE = "\x1b[K"
# Columns taken by the right-aligned status header ("     Cloning ").
HEADER_WIDTH = 12


class Terminal:
    def __init__(
        self,
        stream: TextIO | None = None,
        width: int | None = None,
        quiet: bool = False,
    ):
        self.stream = stream if stream is not None else sys.stderr
        self.quiet = quiet
        self.needs_clear = False
        self._width = width

    def width(self) -> int:
        """Detected terminal width, 80 columns when it cannot be determined."""
        if self._width is not None:
            return self._width
        return shutil.get_terminal_size(fallback=(80, 24)).columns

    @property
    def is_cleared(self) -> bool:
        return not self.needs_clear

    def erase_line(self) -> None:
        self.stream.write(ERASE_LINE)
        self.stream.flush()
        self.needs_clear = False

    def clear(self) -> None:
        """Erase a progress line left on screen, if any."""
        if self.needs_clear:
            self.erase_line()

    def status(self, header: str, message: str) -> None:
        """Print a full status line, e.g. ``     Cloning https://...``."""
        if self.quiet:
            return
        self.clear()
        self.stream.write(f"{header:>{HEADER_WIDTH}} {message}\n")
        self.stream.flush()

    def progress_line(self, header: str, line: str) -> None:
        """Draw ``line`` under ``header`` and return the cursor to column 0."""
        if self.quiet:
            return
        self.needs_clear = False
        self.stream.write(f"{header:>{HEADER_WIDTH}} {line}\r")
        self.stream.flush()
        self.needs_clear = True
