"""CLI formatters — console construction and small display helpers."""

from __future__ import annotations

from typing import Optional, TextIO

from rich.console import Console


def get_console(no_color: bool = False, file: Optional[TextIO] = None) -> Console:
    """Get a Rich Console, optionally with color disabled."""
    return Console(file=file, no_color=no_color, highlight=False)


def format_duration(seconds: float) -> str:
    """Format a duration in human-readable form."""
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        m = int(seconds // 60)
        s = int(seconds % 60)
        return f"{m}m{s:02d}s"
    h = int(seconds // 3600)
    m = int((seconds % 3600) // 60)
    return f"{h}h {m:02d}m"
