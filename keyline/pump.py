"""
Input Pump — background thread moving raw bytes into the signal queue.

For every code read from the raw source:

    -1 / 4   print "^D", enqueue END_OF_INPUT, stop
    3        print "^C", clear the editor's buffer, record the interrupt,
             enqueue INTERRUPT, keep reading
    other    enqueue the byte, keep reading

Read errors and cancellation end the pump quietly. Whatever the reason, the
pump stops the lifecycle on exit so the consumer is never left waiting on a
producer that no longer exists. Nothing escapes ``run()``.
"""

from __future__ import annotations

import threading
from typing import Optional

import structlog

from keyline.editor import LineEditor
from keyline.errors import Cancelled
from keyline.lifecycle import Lifecycle
from keyline.metrics import ConsoleMetrics
from keyline.output import OutputSink
from keyline.signal_queue import SignalQueue
from keyline.signals import Control, classify
from keyline.sources import ByteSource

logger = structlog.get_logger(__name__)

THREAD_NAME = "keyline-input-pump"


class InputPump:
    """Producer side of the console: raw source → signal queue."""

    def __init__(
        self,
        source: ByteSource,
        queue: SignalQueue,
        lifecycle: Lifecycle,
        err: OutputSink,
        editor: Optional[LineEditor] = None,
        metrics: Optional[ConsoleMetrics] = None,
    ) -> None:
        self._source = source
        self._queue = queue
        self._lifecycle = lifecycle
        self._err = err
        self.editor = editor
        self._metrics = metrics or ConsoleMetrics(queue.capacity)
        self._thread = threading.Thread(target=self.run, name=THREAD_NAME, daemon=True)

    @property
    def alive(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the pump thread. Returns True if it has finished."""
        if self._thread.ident is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def run(self) -> None:
        token = self._lifecycle.token
        reason = "stopped"
        try:
            while self._lifecycle.running and not token.cancelled:
                code = self._source.read()
                if token.cancelled:
                    reason = "cancelled"
                    return
                signal = classify(code)
                if signal is Control.END_OF_INPUT:
                    self._err.println("^D")
                    self._queue.put(signal, token)
                    reason = "end_of_input"
                    return
                if signal is Control.INTERRUPT:
                    self._err.println("^C")
                    if self.editor is not None:
                        self.editor.clear_buffer()
                    self._lifecycle.interrupts.add()
                    self._metrics.record_interrupt()
                    self._queue.put(signal, token)
                    continue
                self._queue.put(signal, token)
                self._metrics.record_byte(len(self._queue))
        except Cancelled:
            reason = "cancelled"
        except Exception as e:
            reason = "read_error"
            logger.debug("pump.read_failed", error=str(e), error_type=type(e).__name__)
        finally:
            logger.debug("pump.terminated", reason=reason)
            self._lifecycle.stop()
