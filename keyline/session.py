"""
Command session — executes lines, formats values, holds variables.

The console depends only on the ``CommandSession`` protocol. ``BuiltinSession``
is a small interpreter that makes the console usable on its own:

- a line starting with a double quote is a string expression; ``${NAME}``
  references inside it expand to session variables (this is how prompt
  expressions are evaluated)
- any other line is ``command arg...``, split shell-style; ``${NAME}``
  references in arguments expand before the command runs
- ``set NAME VALUE`` stores VALUE verbatim, without expansion, so prompt
  expressions can be assigned and evaluated later

Builtins: echo, set, unset, get, vars, help. Hosts add more with
``register()``.
"""

from __future__ import annotations

import getpass
import os
import re
import shlex
from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any, Optional, Protocol

from rich.pretty import pretty_repr

from keyline.errors import CommandNotFoundError, CommandUsageError
from keyline.output import OutputSink

CommandHandler = Callable[[list[str]], Any]

_VAR_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_PART_MAX_LEN = 40


class FormatMode(IntEnum):
    """How much detail ``format()`` renders."""

    INSPECT = 0  # full, multi-line inspection
    LINE = 1  # a single line
    PART = 2  # a short fragment for embedding in other output


class CommandSession(Protocol):
    def execute(self, line: str) -> Any: ...

    def format(self, value: Any, mode: FormatMode) -> str: ...

    def get(self, name: str) -> Any: ...

    @property
    def console(self) -> OutputSink: ...


def _current_user() -> str:
    try:
        return getpass.getuser()
    except Exception:
        return os.environ.get("USER") or os.environ.get("USERNAME") or "user"


class BuiltinSession:
    """Minimal interpreter implementing ``CommandSession``."""

    def __init__(
        self,
        out: Optional[OutputSink] = None,
        *,
        application: str = "keyline",
        variables: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._out = out or OutputSink()
        self.variables: dict[str, Any] = {
            "USER": _current_user(),
            "APPLICATION": application,
        }
        if variables:
            self.variables.update(variables)
        self._commands: dict[str, tuple[CommandHandler, str]] = {}
        self._register_builtins()

    @property
    def console(self) -> OutputSink:
        return self._out

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    def register(self, name: str, handler: CommandHandler, help_text: str = "") -> None:
        self._commands[name] = (handler, help_text)

    def get(self, name: str) -> Any:
        return self.variables.get(name)

    def set(self, name: str, value: Any) -> None:
        self.variables[name] = value

    def expand(self, text: str) -> str:
        """Replace ``${NAME}`` references; unknown names expand to ''."""

        def _sub(match: re.Match[str]) -> str:
            value = self.variables.get(match.group(1))
            return "" if value is None else str(value)

        return _VAR_RE.sub(_sub, text)

    def execute(self, line: str) -> Any:
        text = line.strip()
        if not text:
            return None
        if text.startswith('"'):
            return self._evaluate_string(text)

        name, _, rest = text.partition(" ")
        if name == "set":
            return self._set(rest.strip())
        entry = self._commands.get(name)
        if entry is None:
            raise CommandNotFoundError(name)
        handler, _ = entry
        args = [self.expand(arg) for arg in self._split(rest)]
        return handler(args)

    def format(self, value: Any, mode: FormatMode = FormatMode.INSPECT) -> str:
        if mode is FormatMode.INSPECT:
            if isinstance(value, str):
                return value
            return pretty_repr(value)
        if mode is FormatMode.LINE:
            text = value if isinstance(value, str) else pretty_repr(value, max_width=10_000)
            return " ".join(text.split())
        text = value if isinstance(value, str) else repr(value)
        if len(text) > _PART_MAX_LEN:
            return text[: _PART_MAX_LEN - 3] + "..."
        return text

    # ------------------------------------------------------------------
    # Builtins
    # ------------------------------------------------------------------

    def _register_builtins(self) -> None:
        self.register("echo", lambda args: " ".join(args), "Print the arguments")
        self.register("get", self._get, "Show a variable: get NAME")
        self.register("unset", self._unset, "Remove a variable: unset NAME")
        self.register("vars", lambda args: dict(self.variables), "Show all variables")
        self.register("help", self._help, "List commands")

    @staticmethod
    def _split(text: str) -> list[str]:
        try:
            return shlex.split(text)
        except ValueError as e:
            raise CommandUsageError(f"Cannot parse arguments: {e}") from e

    def _evaluate_string(self, text: str) -> str:
        parts = self._split(text)
        if len(parts) != 1:
            raise CommandUsageError("A string expression must be a single quoted string")
        return self.expand(parts[0])

    def _set(self, rest: str) -> Any:
        if not rest:
            return dict(self.variables)
        name, _, value = rest.partition(" ")
        if not _VAR_RE.fullmatch(f"${{{name}}}"):
            raise CommandUsageError(f"Invalid variable name: {name!r}")
        self.variables[name] = value.strip()
        return None

    def _get(self, args: list[str]) -> Any:
        if len(args) != 1:
            raise CommandUsageError("usage: get NAME")
        return self.variables.get(args[0])

    def _unset(self, args: list[str]) -> None:
        if not args:
            raise CommandUsageError("usage: unset NAME...")
        for name in args:
            self.variables.pop(name, None)

    def _help(self, args: list[str]) -> str:
        lines = ["set: Set a variable: set NAME VALUE (stored verbatim)"]
        for name in sorted(self._commands):
            _, help_text = self._commands[name]
            lines.append(f"{name}: {help_text}" if help_text else name)
        return "\n".join(sorted(lines))
