"""
Signal Queue — bounded FIFO between the input pump and the input stream.

Concurrency model:
  - put() blocks while the queue is full (backpressure, never drops)
  - take() blocks while the queue is empty
  - both waits are cancellable through a ``CancellationToken``; a cancelled
    wait raises ``Cancelled``
  - items already queued are still handed out after cancellation, so a
    consumer can drain what the producer managed to deliver
  - ordering is strict FIFO

A single ``threading.Condition`` guards the deque; no other locks exist.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Optional

from keyline.errors import Cancelled
from keyline.lifecycle import CancellationToken
from keyline.signals import Signal

QUEUE_CAPACITY = 1024


class SignalQueue:
    """Bounded blocking queue of input signals."""

    def __init__(self, capacity: int = QUEUE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: deque[Signal] = deque()
        self._cond = threading.Condition()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def empty(self) -> bool:
        return len(self) == 0

    def full(self) -> bool:
        return len(self) >= self._capacity

    def watch(self, token: CancellationToken) -> None:
        """Wake this queue's waiters when *token* is cancelled."""
        token.add_callback(self.wake)

    def wake(self) -> None:
        """Wake every blocked waiter so it re-checks its cancellation token."""
        with self._cond:
            self._cond.notify_all()

    def put(self, signal: Signal, token: Optional[CancellationToken] = None) -> None:
        """Append *signal*, blocking while the queue is full.

        Raises ``Cancelled`` if *token* is cancelled before the signal is
        stored; a cancelled put never stores its signal.
        """
        with self._cond:
            while True:
                if token is not None and token.cancelled:
                    raise Cancelled("put cancelled")
                if len(self._items) < self._capacity:
                    self._items.append(signal)
                    self._cond.notify_all()
                    return
                self._cond.wait()

    def take(self, token: Optional[CancellationToken] = None) -> Signal:
        """Remove and return the oldest signal, blocking while empty.

        Raises ``Cancelled`` only when the queue is empty and *token* is
        cancelled.
        """
        with self._cond:
            while True:
                if self._items:
                    signal = self._items.popleft()
                    self._cond.notify_all()
                    return signal
                if token is not None and token.cancelled:
                    raise Cancelled("take cancelled")
                self._cond.wait()

    def poll(self) -> Optional[Signal]:
        """Remove and return the oldest signal, or None when empty. Never blocks."""
        with self._cond:
            if not self._items:
                return None
            signal = self._items.popleft()
            self._cond.notify_all()
            return signal
