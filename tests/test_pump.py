"""Tests for keyline/pump.py — the background producer."""

from __future__ import annotations

import io
import itertools
from unittest.mock import MagicMock

from conftest import TIMEOUT, FailingSource, wait_until
from keyline.lifecycle import Lifecycle
from keyline.metrics import ConsoleMetrics
from keyline.output import OutputSink
from keyline.pump import THREAD_NAME, InputPump
from keyline.signal_queue import SignalQueue
from keyline.signals import END_OF_INPUT, INTERRUPT, ByteSignal
from keyline.sources import IterableSource


def _pump(source, capacity: int = 64, editor=None):
    lifecycle = Lifecycle()
    queue = SignalQueue(capacity)
    queue.watch(lifecycle.token)
    err = OutputSink(io.StringIO(), no_color=True)
    metrics = ConsoleMetrics(capacity)
    pump = InputPump(source, queue, lifecycle, err, editor=editor, metrics=metrics)
    lifecycle.start()
    return pump, queue, lifecycle, err, metrics


def _drain(queue: SignalQueue) -> list:
    items = []
    while (item := queue.poll()) is not None:
        items.append(item)
    return items


class TestClassification:
    def test_bytes_forwarded_in_order(self) -> None:
        pump, queue, _, _, metrics = _pump(IterableSource([b"ls -a", 4]))
        pump.run()
        assert _drain(queue) == [ByteSignal(b) for b in b"ls -a"] + [END_OF_INPUT]
        assert metrics.counter("bytes_pumped_total") == 5
        assert metrics.queue_high_water == 5
        assert not metrics.backpressured

    def test_ctrl_d_ends_the_pump(self) -> None:
        source = IterableSource([b"a", 4, b"never read"])
        pump, queue, lifecycle, err, _ = _pump(source)
        pump.run()
        assert _drain(queue) == [ByteSignal(ord("a")), END_OF_INPUT]
        assert err.stream.getvalue() == "^D\n"
        assert not lifecycle.running
        assert lifecycle.token.cancelled

    def test_physical_eof_treated_as_ctrl_d(self) -> None:
        pump, queue, lifecycle, err, _ = _pump(IterableSource([b"q"]))
        pump.run()
        assert _drain(queue) == [ByteSignal(ord("q")), END_OF_INPUT]
        assert "^D" in err.stream.getvalue()
        assert not lifecycle.running

    def test_ctrl_c_interrupts_and_continues(self) -> None:
        editor = MagicMock()
        pump, queue, lifecycle, err, metrics = _pump(
            IterableSource([b"ab", 3, b"c", 4]), editor=editor
        )
        pump.run()
        assert _drain(queue) == [
            ByteSignal(ord("a")),
            ByteSignal(ord("b")),
            INTERRUPT,
            ByteSignal(ord("c")),
            END_OF_INPUT,
        ]
        editor.clear_buffer.assert_called_once()
        assert lifecycle.interrupts.pending == 1
        assert err.stream.getvalue() == "^C\n^D\n"
        assert metrics.counter("interrupts_total") == 1


class TestTermination:
    def test_read_error_terminates_quietly(self) -> None:
        pump, queue, lifecycle, err, _ = _pump(FailingSource())
        pump.run()
        assert queue.empty()
        assert err.stream.getvalue() == ""
        assert not lifecycle.running
        assert lifecycle.token.cancelled

    def test_invalid_code_terminates_quietly(self) -> None:
        pump, _, lifecycle, _, _ = _pump(IterableSource([999]))
        pump.run()
        assert not lifecycle.running

    def test_blocked_put_released_by_stop(self) -> None:
        source = IterableSource(itertools.repeat(ord("x")))
        pump, queue, lifecycle, _, metrics = _pump(source, capacity=2)
        pump.start()
        assert wait_until(queue.full)
        assert wait_until(lambda: metrics.backpressured)
        assert pump.alive
        lifecycle.stop()
        assert pump.join(TIMEOUT)
        assert len(queue) == 2

    def test_does_not_read_when_not_running(self) -> None:
        source = MagicMock()
        lifecycle = Lifecycle()
        pump = InputPump(source, SignalQueue(4), lifecycle, OutputSink(io.StringIO()))
        pump.run()
        source.read.assert_not_called()

    def test_thread_is_named_daemon(self) -> None:
        pump, _, _, _, _ = _pump(IterableSource([4]))
        assert pump._thread.name == THREAD_NAME
        assert pump._thread.daemon
        assert pump.join(0) is True
        pump.start()
        assert pump.join(TIMEOUT)
