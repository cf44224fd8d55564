"""
Tab completion — bridges host completers to the line editor.

Hosts implement ``Completer``: given the whole line and the cursor, return
candidate words for the token under the cursor. The editor consumes
``CompletionSource``: given the line, return where the token starts and the
candidates that may replace it. ``CompleterAdapter`` turns one into the other
so neither side has to know the other's shape.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from keyline.session import BuiltinSession


class Completer(Protocol):
    def complete(self, buffer: str, cursor: int) -> list[str]: ...


@dataclass(frozen=True)
class Completion:
    start: int
    candidates: list[str] = field(default_factory=list)

    @property
    def common_prefix(self) -> str:
        return os.path.commonprefix(self.candidates) if self.candidates else ""


@runtime_checkable
class CompletionSource(Protocol):
    def completions(self, line: str) -> Completion: ...


@runtime_checkable
class SupportsCompletion(Protocol):
    """An editor that can be given a completion source after construction."""

    def set_completion(self, source: CompletionSource) -> None: ...


def token_start(line: str) -> int:
    """Index where the whitespace-delimited token at the end of *line* starts."""
    return len(line) - len(line.split(" ")[-1])


class CompleterAdapter:
    """Adapts a ``Completer`` to the editor's ``CompletionSource``."""

    def __init__(self, completer: Completer) -> None:
        self.completer = completer

    def completions(self, line: str) -> Completion:
        start = token_start(line)
        prefix = line[start:]
        found = self.completer.complete(line, len(line))
        candidates = sorted({c for c in found if c.startswith(prefix)})
        return Completion(start, candidates)


class CommandCompleter:
    """Completes command names in the first word and ``${NAME}`` variables after it."""

    def __init__(self, session: BuiltinSession) -> None:
        self._session = session

    def complete(self, buffer: str, cursor: int) -> list[str]:
        line = buffer[:cursor]
        start = token_start(line)
        prefix = line[start:]
        if not line[:start].strip():
            return [n for n in [*self._session.commands, "set"] if n.startswith(prefix)]
        if prefix.startswith("$"):
            names = (f"${{{name}}}" for name in sorted(self._session.variables))
            return [n for n in names if n.startswith(prefix)]
        return []
