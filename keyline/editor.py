"""
Line editor — turns the interruptible byte stream into logical lines.

The console only depends on the ``LineEditor`` protocol. ``SimpleLineEditor``
is the built-in implementation: printable input, UTF-8, backspace, Ctrl-U,
CR/LF to submit, and ANSI escape sequences (arrow keys etc.) ignored. It has
no cursor movement or history; tab completes when a completion source is
set and is inserted literally otherwise.
"""

from __future__ import annotations

import codecs
import threading
from typing import Optional, Protocol

import structlog

from keyline.completion import CompletionSource
from keyline.output import OutputSink
from keyline.signals import EOF

logger = structlog.get_logger(__name__)

BACKSPACE = (0x08, 0x7F)
KILL_LINE = 0x15
ESCAPE = 0x1B
SUBMIT = (0x0A, 0x0D)
TAB = 0x09


class ByteStream(Protocol):
    def read(self) -> int: ...


class LineEditor(Protocol):
    def read_line(self, prompt: str) -> Optional[str]:
        """Block until a complete line is entered; None at end of input."""
        ...

    def clear_buffer(self) -> None:
        """Discard the line currently being edited."""
        ...


class SimpleLineEditor:
    """Minimal line editor reading one byte at a time from *stream*."""

    def __init__(
        self,
        stream: ByteStream,
        out: OutputSink,
        *,
        echo: bool = True,
        show_prompt: bool = True,
        completion: Optional[CompletionSource] = None,
    ) -> None:
        self._stream = stream
        self._out = out
        self.echo = echo
        self.show_prompt = show_prompt
        self.completion = completion
        self._prompt = ""
        self._lock = threading.Lock()
        self._chars: list[str] = []
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def buffer(self) -> str:
        with self._lock:
            return "".join(self._chars)

    def clear_buffer(self) -> None:
        with self._lock:
            self._chars.clear()
            self._decoder.reset()

    def set_completion(self, source: CompletionSource) -> None:
        self.completion = source

    def read_line(self, prompt: str) -> Optional[str]:
        self._prompt = prompt
        if self.show_prompt:
            self._out.write(prompt)
        try:
            while True:
                code = self._stream.read()
                if code == EOF:
                    # Ctrl-D disconnects; a half-typed line is never submitted.
                    return None
                if code in SUBMIT:
                    line = self.buffer
                    self._emit("\n")
                    return line
                self._handle(code)
        finally:
            # An InputCancelled from the stream abandons the edit too.
            self.clear_buffer()

    def _handle(self, code: int) -> None:
        if code in BACKSPACE:
            with self._lock:
                if not self._chars:
                    return
                self._chars.pop()
            self._emit("\b \b")
        elif code == KILL_LINE:
            with self._lock:
                count = len(self._chars)
                self._chars.clear()
            self._emit("\b \b" * count)
        elif code == ESCAPE:
            self._skip_escape_sequence()
        elif code == TAB and self.completion is not None:
            self._complete()
        elif code < 0x20 and code != TAB:
            return
        else:
            with self._lock:
                text = self._decoder.decode(bytes([code]))
                self._chars.extend(text)
            if text:
                self._emit(text)

    def _skip_escape_sequence(self) -> None:
        # CSI sequences end with a byte in 0x40..0x7E; other escapes are two bytes.
        code = self._stream.read()
        if code != ord("["):
            return
        while True:
            code = self._stream.read()
            if code == EOF or 0x40 <= code <= 0x7E:
                return

    def _emit(self, text: str) -> None:
        if self.echo:
            self._out.write(text)

    def _complete(self) -> None:
        line = self.buffer
        try:
            result = self.completion.completions(line)
        except Exception as e:
            logger.debug("editor.completion_failed", error=str(e), error_type=type(e).__name__)
            return
        if not result.candidates:
            return
        if len(result.candidates) == 1:
            insert = result.candidates[0][len(line) - result.start :] + " "
        else:
            insert = result.common_prefix[len(line) - result.start :]
        if insert:
            with self._lock:
                self._chars.extend(insert)
            self._emit(insert)
            return
        # Ambiguous with nothing to add: list the choices and redraw the line.
        self._emit("\n" + "  ".join(result.candidates) + "\n")
        if self.show_prompt:
            self._emit(self._prompt)
        self._emit(line)
