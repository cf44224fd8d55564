"""
Signals — the tagged values carried from the input pump to the consumer.

Raw sources speak in integer codes: ``0..255`` are bytes, ``-1`` is physical
end-of-stream. Two byte values are control requests rather than data:

    3  (Ctrl-C)  interrupt the current line edit
    4  (Ctrl-D)  end the session

``classify()`` turns a code into exactly one of ``ByteSignal``, ``INTERRUPT``
or ``END_OF_INPUT`` so consumers match on type instead of magic numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

EOF = -1
CTRL_C = 3
CTRL_D = 4


class Control(Enum):
    """Control signals multiplexed with data bytes."""

    INTERRUPT = CTRL_C
    END_OF_INPUT = CTRL_D

    @property
    def code(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"<{self.name}>"


INTERRUPT = Control.INTERRUPT
END_OF_INPUT = Control.END_OF_INPUT


@dataclass(frozen=True, slots=True)
class ByteSignal:
    """A literal byte to deliver to the line editor."""

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 255:
            raise ValueError(f"byte value out of range: {self.value}")

    @property
    def code(self) -> int:
        return self.value


Signal = Union[ByteSignal, Control]


def classify(code: int) -> Signal:
    """Map a raw source code to its signal.

    ``-1`` and ``4`` both mean end-of-input; ``3`` is an interrupt request;
    every other value in ``0..255`` is a literal byte.
    """
    if code == EOF or code == CTRL_D:
        return END_OF_INPUT
    if code == CTRL_C:
        return INTERRUPT
    if 0 <= code <= 255:
        return ByteSignal(code)
    raise ValueError(f"not a valid input code: {code}")
