"""
Raw byte sources read by the input pump.

A source returns one code per ``read()`` call: a byte value ``0..255`` or
``-1`` at end of stream. Errors are raised as ``OSError``.
"""

from __future__ import annotations

import os
import select
from collections.abc import Iterable, Iterator
from typing import BinaryIO, Optional, Protocol, runtime_checkable

from keyline.lifecycle import CancellationToken
from keyline.signals import EOF


@runtime_checkable
class ByteSource(Protocol):
    def read(self) -> int: ...


class StreamSource:
    """Single-byte reads from a binary file object (e.g. ``sys.stdin.buffer``)."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read(self) -> int:
        data = self._stream.read(1)
        if not data:
            return EOF
        return data[0]


class FileDescriptorSource:
    """Unbuffered single-byte reads from a file descriptor.

    Waits with ``select`` in slices of *poll_interval* seconds so a pending
    read notices cancellation of *token* without needing another byte. A
    cancelled read returns ``-1``.
    """

    def __init__(
        self,
        fd: int,
        token: Optional[CancellationToken] = None,
        poll_interval: float = 0.1,
    ) -> None:
        self._fd = fd
        self._token = token
        self._poll_interval = poll_interval

    def bind(self, token: CancellationToken) -> None:
        self._token = token

    def read(self) -> int:
        while True:
            if self._token is not None and self._token.cancelled:
                return EOF
            ready, _, _ = select.select([self._fd], [], [], self._poll_interval)
            if ready:
                break
        data = os.read(self._fd, 1)
        if not data:
            return EOF
        return data[0]


class IterableSource:
    """Replays a fixed sequence of codes, then reports end of stream.

    Accepts ``bytes``/``str`` chunks or plain ints, so scripted input such as
    ``IterableSource([b"echo hi\\n", 3, b"ls\\n"])`` reads naturally.
    """

    def __init__(self, items: Iterable[int | bytes | str]) -> None:
        self._codes: Iterator[int] = self._flatten(items)

    @staticmethod
    def _flatten(items: Iterable[int | bytes | str]) -> Iterator[int]:
        for item in items:
            if isinstance(item, str):
                yield from item.encode("utf-8")
            elif isinstance(item, (bytes, bytearray)):
                yield from item
            else:
                yield int(item)

    def read(self) -> int:
        return next(self._codes, EOF)
