"""
Lifecycle — state shared between the input pump and the console loop.

One ``Lifecycle`` exists per console. It holds:

- ``running``: set when the loop starts, cleared exactly once on shutdown
- ``interrupts``: pending keyboard interrupts raised by the pump and consumed
  by the input stream
- ``token``: the single cancellation signal both threads observe; cancelling
  it wakes every thread blocked in the signal queue or in a pollable read

Stopping is one operation (``stop()``) so the producer and the consumer see
"running" and "cancelled" flip together.
"""

from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)


class CancellationToken:
    """One-shot cancellation signal with wake-up callbacks.

    Callbacks registered with ``add_callback`` run once, on the thread that
    calls ``cancel()``. A callback added after cancellation runs immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Cancel the token. Returns False if it was already cancelled."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning("lifecycle.cancel_callback_failed", error=str(e))
        return True

    def add_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()


class PendingInterrupts:
    """Count of keyboard interrupts not yet reported to the consumer.

    ``consume()`` is an atomic test-and-decrement, so an interrupt is reported
    exactly once no matter which side of a blocking take observes it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending = 0

    def add(self) -> None:
        with self._lock:
            self._pending += 1

    def consume(self) -> bool:
        with self._lock:
            if self._pending == 0:
                return False
            self._pending -= 1
            return True

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending


class Lifecycle:
    """Running flag, pending interrupts and cancellation for one console."""

    def __init__(self) -> None:
        self._running = threading.Event()
        self._lock = threading.Lock()
        self.interrupts = PendingInterrupts()
        self.token = CancellationToken()

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def start(self) -> bool:
        """Set ``running``. Returns False once stopped; consoles are single-use."""
        with self._lock:
            if self.token.cancelled:
                return False
            self._running.set()
            return True

    def stop(self) -> bool:
        """Clear ``running`` and cancel the token.

        Idempotent. Returns True only for the call that actually stopped it.
        """
        with self._lock:
            self._running.clear()
            stopped = self.token.cancel()
        if stopped:
            logger.debug("lifecycle.stopped")
        return stopped
