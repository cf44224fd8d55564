"""
Raw terminal mode for the console's input.

In raw mode the terminal stops generating SIGINT/EOF itself and delivers
Ctrl-C and Ctrl-D as bytes 3 and 4, which is what the input pump expects.
Output post-processing stays on so "\\n" still returns the carriage.
"""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

import structlog

try:  # pragma: no cover - platform-dependent optional module
    import termios as _termios
    import tty as _tty
except Exception:  # pragma: no cover
    _termios = None
    _tty = None

logger = structlog.get_logger(__name__)


def supports_raw_mode(fd: int) -> bool:
    if _termios is None:
        return False
    try:
        return os.isatty(fd)
    except Exception:
        return False


class RawTerminal:
    """Context manager switching *fd* to raw mode and restoring it on exit.

    A no-op when *fd* is not a TTY or the platform has no termios, so callers
    can use it unconditionally.
    """

    def __init__(self, fd: Optional[int] = None, *, enabled: bool = True) -> None:
        self._fd = fd
        self._enabled = enabled
        self._saved: Optional[list[Any]] = None

    @property
    def active(self) -> bool:
        return self._saved is not None

    def __enter__(self) -> "RawTerminal":
        if not self._enabled:
            return self
        if self._fd is None:
            self._fd = sys.stdin.fileno()
        if not supports_raw_mode(self._fd):
            return self
        try:
            self._saved = _termios.tcgetattr(self._fd)
            _tty.setraw(self._fd)
            attrs = _termios.tcgetattr(self._fd)
            attrs[1] |= _termios.OPOST
            _termios.tcsetattr(self._fd, _termios.TCSADRAIN, attrs)
        except Exception as e:
            logger.debug("terminal.raw_mode_failed", error=str(e))
            self.restore()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()

    def restore(self) -> None:
        """Best-effort restoration to avoid leaving a no-echo shell behind."""
        if self._saved is None:
            return
        saved, self._saved = self._saved, None
        try:
            _termios.tcsetattr(self._fd, _termios.TCSADRAIN, saved)
        except Exception as e:
            logger.debug("terminal.restore_failed", error=str(e))
