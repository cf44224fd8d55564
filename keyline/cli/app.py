"""CLI application — Click-based entry point for keyline.

Invoking ``keyline`` without a subcommand starts the interactive console;
``keyline run`` does the same with per-run overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import click


@click.group(invoke_without_command=True)
@click.option("--quiet", "-q", is_flag=True, help="Skip the welcome message")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and full tracebacks")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors")
@click.pass_context
def cli(ctx: click.Context, quiet: bool, verbose: bool, no_color: bool) -> None:
    """keyline - interactive console with an interruptible input pipeline."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["verbose"] = verbose
    ctx.obj["no_color"] = no_color

    if ctx.invoked_subcommand is None:
        from keyline.cli.repl import run_repl

        ctx.exit(run_repl(ctx.obj))


@cli.command("run")
@click.option("--prompt", default=None, help="Prompt expression, e.g. '\"${USER}> \"'")
@click.option("--capacity", type=int, default=None, help="Signal queue capacity")
@click.option("--no-raw", is_flag=True, help="Leave the terminal in cooked mode")
@click.option(
    "--branding-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML file providing the welcome message",
)
@click.pass_context
def run_cmd(
    ctx: click.Context,
    prompt: Optional[str],
    capacity: Optional[int],
    no_raw: bool,
    branding_file: Optional[Path],
) -> None:
    """Start the interactive console."""
    from keyline.cli.repl import run_repl

    options: dict[str, Any] = dict(ctx.obj or {})
    options.update(
        prompt=prompt,
        capacity=capacity,
        no_raw=no_raw,
        branding_file=branding_file,
    )
    ctx.exit(run_repl(options))
