"""Throttled single-line progress bar with a transfer-rate suffix.

A Progress instance belongs to exactly one clone; its throttle, last drawn
line and rate samples are never shared.
"""

from __future__ import annotations

import math
import time
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass

from dev_workspaces.git.terminal import Terminal

Clock = Callable[[], float]

FIRST_RENDER_DELAY = 0.5
RENDER_INTERVAL = 0.1
RATE_SAMPLE_INTERVAL = 0.3
RATE_SLOTS = 10
MAX_PRINT = 50
# Columns kept free for the status header.
RESERVED = 15

UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def char_width(ch: str) -> int:
    """Display width of a single character in a terminal cell grid."""
    if unicodedata.combining(ch) or unicodedata.category(ch) in ("Cc", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def human_readable_bytes(count: float) -> tuple[float, str]:
    """Scale ``count`` bytes to the largest binary unit keeping the value >= 1.

    Returns:
        ``(quantity, unit)``; values below 1 stay in bytes, values beyond the
        last unit are expressed in EiB.
    """
    if not math.isfinite(count):
        return (0.0, UNITS[0])
    if count < 1:
        return (float(count), UNITS[0])
    index = min(int(math.log2(count) / 10), len(UNITS) - 1)
    return (count / 1024 ** index, UNITS[index])


class Throttle:
    """Withhold the first render for 500ms, then allow one every 100ms."""

    def __init__(self, clock: Clock):
        self._clock = clock
        self.first = True
        self.last_update = clock()

    def allowed(self) -> bool:
        delay = FIRST_RENDER_DELAY if self.first else RENDER_INTERVAL
        if self._clock() - self.last_update < delay:
            return False
        self.update()
        return True

    def update(self) -> None:
        self.first = False
        self.last_update = self._clock()


@dataclass
class BarFormat:
    max_width: int
    max_print: int = MAX_PRINT

    def width(self) -> int:
        return min(self.max_width, self.max_print)

    def progress(self, done: int, total: int) -> str | None:
        """Render ``[====>    ]  42.00%``, or None when there is no room for a bar."""
        pct = done / total if total else 0.0
        if not math.isfinite(pct):
            pct = 0.0
        pct = min(max(pct, 0.0), 1.0)

        stats = f" {pct * 100:6.2f}%"
        display_width = self.width() - (len(stats) + 2 + RESERVED)
        if display_width < 0:
            return None

        fill = int(display_width * pct)
        bar = ""
        if fill > 0:
            bar = "=" * (fill - 1) + ("=" if done >= total else ">")
        bar += " " * (display_width - fill)
        return f"[{bar}]{stats}"

    def render(self, line: str, msg: str) -> str:
        """Append as much of ``msg`` as fits, ending in ``...`` when truncated."""
        avail = self.max_width - len(line) - RESERVED
        if avail <= 3:
            return line
        out = line
        ellipsis_pos = len(out)
        for ch in msg:
            w = char_width(ch)
            if avail >= w:
                avail -= w
                out += ch
                if avail >= 3:
                    ellipsis_pos = len(out)
            else:
                out = out[:ellipsis_pos] + "..."
                break
        return out


class Progress:
    """Progress bar for one named operation (e.g. ``Fetch``)."""

    def __init__(self, name: str, terminal: Terminal | None = None, clock: Clock = time.monotonic):
        self.name = name
        self.terminal = terminal or Terminal()
        self.done = False
        self.last_line: str | None = None
        self.format = BarFormat(max_width=self.terminal.width())
        self._throttle = Throttle(clock)

    def tick(self, done: int, total: int, msg: str = "") -> bool:
        """Feed a sample; return True if a line was drawn.

        Samples arriving inside the throttle window are dropped, not queued.
        """
        if not self._throttle.allowed():
            return False
        if self.done:
            return False
        if total > 0 and done == total:
            self.done = True

        self.format.max_width = self.terminal.width()
        bar = self.format.progress(done, total)
        if bar is None:
            return False
        return self._print(bar, msg)

    def _print(self, prefix: str, msg: str) -> bool:
        self._throttle.update()
        if self.format.max_width < RESERVED:
            return False

        line = self.format.render(prefix, msg)
        line = line.ljust(self.format.max_width - RESERVED)

        # Skip only while the identical line is still on screen; after a clear it is redrawn.
        if not self.terminal.is_cleared and line == self.last_line:
            return False
        self.terminal.progress_line(self.name, line)
        self.last_line = line
        return True


class MetricsCounter:
    """Ring of the latest ``(count, timestamp)`` samples for rate estimation."""

    def __init__(self, initial: int, at: float, slots: int = RATE_SLOTS):
        if slots <= 0:
            raise ValueError("number of slots must be greater than zero")
        self.slots = [(initial, at)] * slots
        self.index = 0

    def add(self, count: int, at: float) -> None:
        self.slots[self.index] = (count, at)
        self.index = (self.index + 1) % len(self.slots)

    def rate(self) -> float:
        """Per-second average across the ring; 0 when undefined."""
        latest = self.slots[self.index - 1]
        oldest = self.slots[self.index]
        duration = latest[1] - oldest[1]
        if duration <= 0:
            return 0.0
        rate = (latest[0] - oldest[0]) / duration
        return rate if math.isfinite(rate) else 0.0


class TransferProgress:
    """Bridge pygit2 transfer statistics to a Progress bar.

    While objects are received the suffix is the transfer rate; once deltas
    are being resolved it switches to a delta counter. The rate only moves
    when the transport calls back, so it can stall above zero if data stops
    arriving.
    """

    def __init__(self, progress: Progress, clock: Clock = time.monotonic):
        self.progress = progress
        self._clock = clock
        self._last_sample = clock()
        self.counter = MetricsCounter(0, self._last_sample)

    def update(self, stats) -> bool:
        if stats.indexed_deltas > 0:
            msg = f", ({stats.indexed_deltas}/{stats.total_deltas}) resolving deltas"
        else:
            now = self._clock()
            if now - self._last_sample > RATE_SAMPLE_INTERVAL:
                self.counter.add(stats.received_bytes, now)
                self._last_sample = now
            rate, unit = human_readable_bytes(self.counter.rate())
            msg = f", {rate:.2f}{unit}/s"
        return self.progress.tick(stats.indexed_objects, stats.total_objects, msg)
