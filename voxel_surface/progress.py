"""Terminal status reporting for CLI runs (stderr only, stdout carries the result)."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import TextIO


@dataclass(slots=True)
class ProgressPrinter:
    """Status line printer.

    - `log` always prints a line to the stream.
    - `debug` prints only when verbose.
    - `update` draws a carriage-return stage line, only in a TTY.
    """

    enabled: bool | None = None
    verbose: bool = False
    stream: TextIO | None = None
    min_interval_s: float = 0.1

    _last_render: str = ""
    _last_update_t: float = 0.0
    _t0: float = 0.0

    def __post_init__(self) -> None:
        if self.stream is None:
            self.stream = sys.stderr
        if self.enabled is None:
            try:
                self.enabled = bool(self.stream.isatty())
            except Exception:
                self.enabled = False
        self._t0 = time.monotonic()

    def _clear_line(self) -> None:
        if not self.enabled or not self._last_render:
            return
        self.stream.write("\r" + (" " * len(self._last_render)) + "\r")
        self.stream.flush()
        self._last_render = ""

    def log(self, message: str) -> None:
        self._clear_line()
        print(message, file=self.stream)
        self.stream.flush()

    def debug(self, message: str) -> None:
        if not self.verbose:
            return
        elapsed = time.monotonic() - self._t0
        self.log(f"[{elapsed:7.3f}s] {message}")

    def update(self, *, label: str, current: int, total: int) -> None:
        if total <= 0:
            return
        if self.verbose:
            self.debug(f"{label} ({current}/{total})")
            return
        if not self.enabled:
            return

        now = time.monotonic()
        if current < total and (now - self._last_update_t) < float(self.min_interval_s):
            return

        text = f"{label}: {current}/{total}"
        if len(text) < len(self._last_render):
            text = text + (" " * (len(self._last_render) - len(text)))
        self.stream.write("\r" + text)
        self.stream.flush()
        self._last_render = text
        self._last_update_t = now

    def finish(self) -> None:
        """End the current stage line with a newline."""
        if not self.enabled or not self._last_render:
            return
        self.stream.write("\n")
        self.stream.flush()
        self._last_render = ""
