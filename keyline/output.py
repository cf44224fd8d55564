"""Line-oriented output sinks backed by Rich consoles."""

from __future__ import annotations

import sys
import threading
from typing import Optional, TextIO

from rich.console import Console
from rich.text import Text
from rich.traceback import Traceback


class OutputSink:
    """A text stream the console writes whole lines to.

    Both the input pump (status notices) and the console loop (results,
    diagnostics) write through sinks; the lock keeps each logical message on
    its own line when they interleave.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        *,
        no_color: bool = False,
        show_tracebacks: bool = False,
    ) -> None:
        self.stream: TextIO = stream if stream is not None else sys.stdout
        self.show_tracebacks = show_tracebacks
        self._lock = threading.RLock()
        self._console = Console(
            file=self.stream,
            no_color=no_color,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def console(self) -> Console:
        return self._console

    def write(self, text: str) -> None:
        """Write *text* verbatim (used for echo and prompts)."""
        with self._lock:
            self.stream.write(text)
            self.stream.flush()

    def println(self, text: str = "", *, style: Optional[str] = None) -> None:
        with self._lock:
            self._console.print(Text(text, style=style or ""))

    def error(self, exc: BaseException) -> None:
        """Write a diagnostic for *exc*: one red line, or a full traceback."""
        with self._lock:
            if self.show_tracebacks and exc.__traceback__ is not None:
                self._console.print(
                    Traceback.from_exception(type(exc), exc, exc.__traceback__)
                )
                return
            message = str(exc) or type(exc).__name__
            self._console.print(Text(f"Error: {message}", style="red"))
