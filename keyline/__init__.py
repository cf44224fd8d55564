"""
keyline — Interactive console input bridge and read-execute-print loop.

Raw bytes from a terminal are pumped by a background thread, classified into
signals, queued in a bounded queue and exposed as an interruptible blocking
byte stream to a line editor. A foreground loop reads logical lines, runs
them through a command session and isolates per-line failures.

Layers (bottom to top):
    1. Signals (tagged byte / interrupt / end-of-input codes)
    2. Signal queue (bounded, cancellable FIFO)
    3. Lifecycle (running state, pending interrupts, cancellation token)
    4. Input pump (background producer)
    5. Interruptible input stream (consumer side)
    6. Console loop (prompt, read, execute, print)
"""

from keyline.completion import Completer, CompleterAdapter
from keyline.console import Console, ConsoleState
from keyline.errors import Cancelled, InputCancelled, KeylineError
from keyline.lifecycle import CancellationToken, Lifecycle
from keyline.signal_queue import SignalQueue
from keyline.signals import END_OF_INPUT, INTERRUPT, ByteSignal, classify

__version__ = "0.1.0"

__all__ = [
    "ByteSignal",
    "CancellationToken",
    "Cancelled",
    "Completer",
    "CompleterAdapter",
    "Console",
    "ConsoleState",
    "END_OF_INPUT",
    "INTERRUPT",
    "InputCancelled",
    "KeylineError",
    "Lifecycle",
    "SignalQueue",
    "classify",
]
