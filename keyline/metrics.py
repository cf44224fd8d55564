"""
Session metrics for one console.

The input pump records what it forwards and the console loop records what it
executes; both update the same ``ConsoleMetrics`` under one lock. The builtin
``stats`` command prints ``snapshot()``.

    bytes_pumped_total        bytes forwarded by the pump
    interrupts_total          Ctrl-C requests seen by the pump
    commands_total            lines handed to the session
    command_failures_total    lines whose execution or formatting raised
    command_latency_seconds   execution time per line (count/avg/max)
    queue_depth               signal queue length after the last forwarded byte
    queue_high_water          deepest the queue has been; at capacity the
                              pump was held back by the consumer
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from typing import Any


class ConsoleMetrics:
    """Counters and queue gauges shared by the pump thread and the loop."""

    def __init__(self, queue_capacity: int = 0) -> None:
        self._lock = threading.Lock()
        self._counts: Counter[str] = Counter()
        self._queue_capacity = queue_capacity
        self._queue_depth = 0
        self._queue_high_water = 0
        self._latency_total = 0.0
        self._latency_max = 0.0
        self._started = time.monotonic()

    # -- pump side ------------------------------------------------------

    def record_byte(self, queue_depth: int) -> None:
        with self._lock:
            self._counts["bytes_pumped_total"] += 1
            self._queue_depth = queue_depth
            self._queue_high_water = max(self._queue_high_water, queue_depth)

    def record_interrupt(self) -> None:
        with self._lock:
            self._counts["interrupts_total"] += 1

    # -- loop side ------------------------------------------------------

    def record_command(self, seconds: float, *, failed: bool = False) -> None:
        with self._lock:
            self._counts["commands_total"] += 1
            if failed:
                self._counts["command_failures_total"] += 1
            self._latency_total += seconds
            self._latency_max = max(self._latency_max, seconds)

    # -- reading --------------------------------------------------------

    def counter(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    @property
    def queue_high_water(self) -> int:
        with self._lock:
            return self._queue_high_water

    @property
    def backpressured(self) -> bool:
        """True once the queue has been full, i.e. the pump had to wait."""
        with self._lock:
            return bool(self._queue_capacity) and self._queue_high_water >= self._queue_capacity

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            commands = self._counts["commands_total"]
            return {
                "uptime_seconds": round(time.monotonic() - self._started, 1),
                "counters": {
                    name: self._counts[name]
                    for name in (
                        "bytes_pumped_total",
                        "interrupts_total",
                        "commands_total",
                        "command_failures_total",
                    )
                },
                "queue": {
                    "depth": self._queue_depth,
                    "high_water": self._queue_high_water,
                    "capacity": self._queue_capacity,
                },
                "command_latency_seconds": {
                    "count": commands,
                    "avg": round(self._latency_total / commands, 6) if commands else 0.0,
                    "max": round(self._latency_max, 6),
                },
            }
