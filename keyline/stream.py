"""
Interruptible Input Stream — the consumer side of the signal queue.

``read()`` is the line editor's raw input: a blocking single-byte read that
returns ``-1`` at end of input and raises ``InputCancelled`` when the user
pressed Ctrl-C or the console is shutting down.

The pump records an interrupt and then enqueues its marker in two separate
steps, so pending interrupts are checked on both sides of the blocking take.
Each interrupt is reported exactly once:

- if a check consumes it before its marker is dequeued, the stream owes that
  marker and discards everything up to and including it (bytes typed before
  Ctrl-C belong to the abandoned edit)
- otherwise the marker itself consumes it and raises

After shutdown the stream never blocks: it hands out what is still queued
and then reports end of input.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Optional

from keyline.errors import Cancelled, InputCancelled
from keyline.lifecycle import Lifecycle
from keyline.signal_queue import SignalQueue
from keyline.signals import EOF, Control, Signal


class InterruptibleInputStream:
    """Blocking byte stream over a ``SignalQueue``."""

    def __init__(self, queue: SignalQueue, lifecycle: Lifecycle) -> None:
        self._queue = queue
        self._lifecycle = lifecycle
        self._owed_markers = 0  # consumer thread only

    def read(self) -> int:
        while True:
            self._check_interrupt()
            signal = self._next()
            if signal is None or signal is Control.END_OF_INPUT:
                return EOF
            if self._owed_markers:
                if signal is Control.INTERRUPT:
                    self._owed_markers -= 1
                continue
            if signal is Control.INTERRUPT:
                if self._lifecycle.interrupts.consume():
                    raise InputCancelled()
                continue
            self._check_interrupt()
            return signal.value

    def read_bytes(self, n: int) -> bytes:
        """Read up to *n* bytes, stopping early at end of input."""
        out = bytearray()
        while len(out) < n:
            code = self.read()
            if code == EOF:
                break
            out.append(code)
        return bytes(out)

    def __iter__(self) -> Iterator[int]:
        while True:
            code = self.read()
            if code == EOF:
                return
            yield code

    def _next(self) -> Optional[Signal]:
        if not self._lifecycle.running:
            return self._queue.poll()
        try:
            return self._queue.take(self._lifecycle.token)
        except Cancelled as e:
            raise InputCancelled("Input cancelled") from e

    def _check_interrupt(self) -> None:
        if self._lifecycle.interrupts.consume():
            self._owed_markers += 1
            raise InputCancelled()
