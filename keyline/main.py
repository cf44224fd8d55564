"""
Main — entry point for the ``keyline`` command.

Running ``python -m keyline.main`` (or the installed ``keyline`` script)
configures logging and hands over to the Click CLI, whose default action is
the interactive console.
"""

from __future__ import annotations

import logging

import structlog

_logging_configured = False


def configure_logging(level: str = "WARNING", *, colors: bool = True) -> None:
    """Configure structlog and standard-library logging for keyline entry points.

    Safe to call more than once; only the first call takes effect. The
    default level keeps debug chatter from the pump and the loop out of the
    interactive terminal.
    """
    global _logging_configured  # noqa: PLW0603
    if _logging_configured:
        return
    _logging_configured = True

    logging.basicConfig(format="%(message)s", level=getattr(logging, level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main() -> None:
    """Entry point for the keyline command."""
    from keyline.cli.app import cli

    cli()


if __name__ == "__main__":
    main()
