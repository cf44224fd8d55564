"""Exception hierarchy shared by the input pipeline and the console loop."""

from __future__ import annotations


class KeylineError(Exception):
    """Base class for all keyline errors."""


class Cancelled(KeylineError):
    """A blocking queue wait was abandoned because its token was cancelled."""


class InputCancelled(KeylineError):
    """The current line edit was cancelled (keyboard interrupt or shutdown).

    Raised by the interruptible input stream and propagated through the line
    editor. The console loop recovers from it by re-prompting.
    """

    def __init__(self, message: str = "Keyboard interruption") -> None:
        super().__init__(message)


class CommandError(KeylineError):
    """A command could not be executed by the session."""


class CommandNotFoundError(CommandError):
    """The first word of a line does not name a registered command."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Command not found: {name}")
        self.name = name


class CommandUsageError(CommandError):
    """A command was invoked with the wrong arguments."""
