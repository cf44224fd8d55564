"""
Shared fixtures for the keyline test suite.

Provides a raw source the test feeds by hand, in-memory sinks, a session that
records what it executes, and helpers to drive a console on a background
thread without ever hanging the test run.
"""

from __future__ import annotations

import io
import queue
import threading
import time
from collections.abc import Callable
from typing import Any

import pytest

from keyline.config import ConsoleConfig
from keyline.console import Console
from keyline.editor import SimpleLineEditor
from keyline.output import OutputSink
from keyline.session import BuiltinSession

# Upper bound for any wait in the suite.
TIMEOUT = 5.0


# ---------------------------------------------------------------------------
# Raw sources
# ---------------------------------------------------------------------------


class FeedSource:
    """Raw byte source fed by the test; ``read()`` blocks until fed.

    A read that waits longer than TIMEOUT raises ``OSError`` so a forgotten
    ``end()`` terminates the pump instead of hanging the suite.
    """

    def __init__(self) -> None:
        self._codes: queue.Queue[int] = queue.Queue()
        self.reads = 0

    def feed(self, *items: int | bytes | str) -> None:
        for item in items:
            if isinstance(item, str):
                item = item.encode("utf-8")
            if isinstance(item, (bytes, bytearray)):
                for b in item:
                    self._codes.put(b)
            else:
                self._codes.put(int(item))

    def end(self) -> None:
        self._codes.put(-1)

    def read(self) -> int:
        try:
            code = self._codes.get(timeout=TIMEOUT)
        except queue.Empty as e:
            raise OSError("feed source starved") from e
        self.reads += 1
        return code


class FailingSource:
    """Raw source whose reads always fail."""

    def read(self) -> int:
        raise OSError("device gone")


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class RecordingSession(BuiltinSession):
    """BuiltinSession that records executed command lines.

    String expressions (prompt evaluation) are not recorded.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.executed: list[str] = []
        self.register("boom", self._boom, "Always fails")

    def execute(self, line: str) -> Any:
        if not line.strip().startswith('"'):
            self.executed.append(line)
        return super().execute(line)

    @staticmethod
    def _boom(args: list[str]) -> None:
        raise RuntimeError("boom")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def wait_until(predicate: Callable[[], bool], timeout: float = TIMEOUT) -> bool:
    """Poll *predicate* until it is true or *timeout* elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def start_thread(target: Callable[[], Any]) -> threading.Thread:
    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def out() -> OutputSink:
    return OutputSink(io.StringIO(), no_color=True)


@pytest.fixture()
def err() -> OutputSink:
    return OutputSink(io.StringIO(), no_color=True)


@pytest.fixture()
def session(out: OutputSink) -> RecordingSession:
    return RecordingSession(out, application="test", variables={"USER": "tester"})


@pytest.fixture()
def feed() -> FeedSource:
    return FeedSource()


def _silent_editor(stream: Any, sink: OutputSink) -> SimpleLineEditor:
    return SimpleLineEditor(stream, sink, echo=False, show_prompt=False)


@pytest.fixture()
def make_console(session: RecordingSession, out: OutputSink, err: OutputSink):
    """Factory building a Console over the shared session and sinks."""

    def _make(source: Any, **kwargs: Any) -> Console:
        kwargs.setdefault("branding", {})
        kwargs.setdefault("editor_factory", _silent_editor)
        kwargs.setdefault("config", ConsoleConfig())
        return Console(session, source, out, err, **kwargs)

    return _make


def text_of(sink: OutputSink) -> str:
    return sink.stream.getvalue()
