"""REPL launcher — wires a Console to the process's standard streams.

On a TTY the input is read unbuffered from the file descriptor with the
terminal in raw mode, so Ctrl-C and Ctrl-D reach the input pump as bytes.
Piped input is read from the binary stdin stream with no prompt or echo.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, BinaryIO, Optional, TextIO

import click
from pydantic import ValidationError

from keyline.cli.formatters import format_duration, get_console
from keyline.completion import CommandCompleter
from keyline.config import ConsoleConfig
from keyline.console import Console
from keyline.editor import SimpleLineEditor
from keyline.main import configure_logging
from keyline.output import OutputSink
from keyline.session import BuiltinSession
from keyline.sources import ByteSource, FileDescriptorSource, StreamSource
from keyline.terminal import RawTerminal


def _config_overrides(options: dict[str, Any]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if options.get("prompt"):
        overrides["default_prompt"] = options["prompt"]
    if options.get("capacity") is not None:
        overrides["queue_capacity"] = options["capacity"]
    if options.get("no_raw"):
        overrides["raw_mode"] = False
    if options.get("branding_file") is not None:
        overrides["branding_file"] = Path(options["branding_file"])
    if options.get("verbose"):
        overrides["show_tracebacks"] = True
        overrides["log_level"] = "DEBUG"
    return overrides


def run_repl(
    options: Optional[dict[str, Any]] = None,
    *,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run the interactive console until end of input; return an exit code."""
    options = options or {}
    no_color = bool(options.get("no_color"))
    stdin = stdin or click.get_binary_stream("stdin")
    stdout = stdout or click.get_text_stream("stdout")
    stderr = stderr or click.get_text_stream("stderr")

    try:
        config = ConsoleConfig(**_config_overrides(options))
    except ValidationError as e:
        get_console(no_color, file=stderr).print(f"[red]Config error: {e}[/red]")
        return 2

    configure_logging(config.log_level, colors=not no_color)

    out = OutputSink(stdout, no_color=no_color)
    err = OutputSink(stderr, no_color=no_color, show_tracebacks=config.show_tracebacks)
    session = BuiltinSession(out, application=config.application)

    tty = stdin.isatty()
    interactive = config.raw_mode and tty
    source: ByteSource
    fd: Optional[int] = None
    if interactive:
        fd = stdin.fileno()
        source = FileDescriptorSource(fd, poll_interval=config.poll_interval)
    else:
        source = StreamSource(stdin)

    started = time.monotonic()

    def _goodbye() -> None:
        if tty:
            err.println(f"Session closed after {format_duration(time.monotonic() - started)}.")

    with RawTerminal(fd, enabled=interactive) as raw:
        console = Console(
            session,
            source,
            out,
            err,
            editor_factory=lambda stream, sink: SimpleLineEditor(
                stream, sink, echo=raw.active, show_prompt=tty
            ),
            completer=CommandCompleter(session) if raw.active else None,
            close_callback=_goodbye,
            config=config,
            branding={} if options.get("quiet") or not tty else None,
        )
        session.register("exit", lambda args: console.close(), "Close the console")
        session.register("stats", lambda args: console.metrics.snapshot(), "Show session metrics")
        console.run()
    return 0
