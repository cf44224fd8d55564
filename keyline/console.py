"""
Console — the foreground read-execute-print loop.

    STARTING ──► READING ◄──► EXECUTING
                    │
                    ▼
                  ENDED

STARTING   start the input pump, print the welcome message
READING    build the prompt, block in the line editor
             line             → EXECUTING
             end of input     → ENDED
             InputCancelled   → READING (the edit is discarded)
EXECUTING  run the line through the session, print the formatted result;
           any failure is reported and the loop goes back to READING
ENDED      stop the lifecycle, release the pump, run the shutdown callback
           exactly once

The console owns the signal queue, the lifecycle, the input stream and the
pump. The session, the raw source and the sinks are supplied by the host.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional

import structlog

from keyline.branding import branding_paths, load_branding, welcome_message
from keyline.completion import Completer, CompleterAdapter, SupportsCompletion
from keyline.config import PROMPT_VARIABLE, ConsoleConfig
from keyline.editor import LineEditor, SimpleLineEditor
from keyline.errors import InputCancelled
from keyline.lifecycle import Lifecycle
from keyline.metrics import ConsoleMetrics
from keyline.output import OutputSink
from keyline.pump import InputPump
from keyline.session import CommandSession, FormatMode
from keyline.signal_queue import SignalQueue
from keyline.sources import ByteSource, FileDescriptorSource
from keyline.stream import InterruptibleInputStream

logger = structlog.get_logger(__name__)

EditorFactory = Callable[[InterruptibleInputStream, OutputSink], LineEditor]

# How long ENDED waits for the pump thread before leaving it to die as a daemon.
_PUMP_JOIN_TIMEOUT = 1.0


class ConsoleState(Enum):
    STARTING = "starting"
    READING = "reading"
    EXECUTING = "executing"
    ENDED = "ended"


class Console:
    """Interactive console over a raw byte source."""

    def __init__(
        self,
        session: CommandSession,
        source: ByteSource,
        out: Optional[OutputSink] = None,
        err: Optional[OutputSink] = None,
        *,
        editor_factory: Optional[EditorFactory] = None,
        completer: Optional[Completer] = None,
        close_callback: Optional[Callable[[], None]] = None,
        config: Optional[ConsoleConfig] = None,
        branding: Optional[dict[str, Any]] = None,
        metrics: Optional[ConsoleMetrics] = None,
    ) -> None:
        self._config = config or ConsoleConfig()
        self.session = session
        self._out = out or session.console
        self._err = err or OutputSink(show_tracebacks=self._config.show_tracebacks)
        self._close_callback = close_callback
        self._branding = branding
        self.metrics = metrics or ConsoleMetrics(self._config.queue_capacity)

        self.lifecycle = Lifecycle()
        self.queue = SignalQueue(self._config.queue_capacity)
        self.queue.watch(self.lifecycle.token)
        self.stream = InterruptibleInputStream(self.queue, self.lifecycle)
        factory = editor_factory or SimpleLineEditor
        self.editor: LineEditor = factory(self.stream, self._out)
        if completer is not None and isinstance(self.editor, SupportsCompletion):
            self.editor.set_completion(CompleterAdapter(completer))

        if isinstance(source, FileDescriptorSource):
            source.bind(self.lifecycle.token)
        self.pump = InputPump(
            source,
            self.queue,
            self.lifecycle,
            self._err,
            editor=self.editor,
            metrics=self.metrics,
        )

        self.state = ConsoleState.STARTING
        self._closing = threading.Event()
        self._end_lock = threading.Lock()
        self._ended = False

    @property
    def closed(self) -> bool:
        return self._ended

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run the loop until end of input or ``close()``; blocks the caller."""
        try:
            if self._closing.is_set() or not self.lifecycle.start():
                return
            self.pump.start()
            self.welcome()
            while not self._closing.is_set():
                self.state = ConsoleState.READING
                try:
                    line = self.editor.read_line(self.get_prompt())
                except InputCancelled:
                    continue
                except KeyboardInterrupt:
                    self._err.println("^C")
                    self.editor.clear_buffer()
                    continue
                if line is None or self._closing.is_set():
                    break
                if not line.strip():
                    continue
                self.state = ConsoleState.EXECUTING
                self._execute(line)
        except Exception as e:
            logger.error("console.loop_failed", error=str(e), exc_info=True)
        finally:
            self._end()

    def _execute(self, line: str) -> None:
        started = time.monotonic()
        failed = False
        try:
            result = self.session.execute(line)
            if result is not None and result != "":
                self.session.console.println(self.session.format(result, FormatMode.INSPECT))
        except KeyboardInterrupt:
            self._err.println("^C")
        except Exception as e:
            failed = True
            logger.info("console.command_failed", error=str(e), error_type=type(e).__name__)
            self._err.error(e)
        finally:
            self.metrics.record_command(time.monotonic() - started, failed=failed)

    # ------------------------------------------------------------------
    # Prompt and welcome
    # ------------------------------------------------------------------

    def get_prompt(self) -> str:
        """Evaluate the prompt; never raises and never returns ''.

        Uses the session's PROMPT variable or the default template, evaluated
        through the session. An evaluation failure yields the template text
        itself; any other failure yields the fallback prompt.
        """
        fallback = self._config.fallback_prompt
        try:
            try:
                value = self.session.get(PROMPT_VARIABLE)
                template = str(value) if value is not None else self._config.default_prompt
            except Exception:
                template = self._config.default_prompt
            try:
                evaluated = self.session.execute(template)
            except Exception as e:
                logger.debug("console.prompt_eval_failed", error=str(e))
                return template or fallback
            prompt = str(evaluated) if evaluated is not None else template
            return prompt or fallback
        except Exception:
            return fallback

    def welcome(self) -> None:
        branding = self._branding
        if branding is None:
            branding = load_branding(branding_paths(self._config.branding_file))
        message = welcome_message(branding)
        if message:
            self.session.console.println(message)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Request the loop to end. Safe from any thread, safe to repeat."""
        if not self._closing.is_set():
            logger.debug("console.close_requested")
        self._closing.set()
        self.lifecycle.stop()

    def _end(self) -> None:
        with self._end_lock:
            if self._ended:
                return
            self._ended = True
        self.state = ConsoleState.ENDED
        self.lifecycle.stop()
        if not self.pump.join(_PUMP_JOIN_TIMEOUT):
            logger.debug("console.pump_still_blocked")
        logger.debug(
            "console.ended",
            metrics=self.metrics.snapshot()["counters"],
            backpressured=self.metrics.backpressured,
        )
        if self._close_callback is not None:
            self._close_callback()
