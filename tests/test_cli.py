"""Tests for keyline/cli/ — Click-based CLI commands."""

from __future__ import annotations

import io

from click.testing import CliRunner

from keyline.cli.app import cli
from keyline.cli.formatters import format_duration, get_console
from keyline.cli.repl import run_repl


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


class TestFormatDuration:
    def test_seconds(self) -> None:
        assert format_duration(45) == "45s"

    def test_minutes(self) -> None:
        assert format_duration(125) == "2m05s"

    def test_hours(self) -> None:
        assert format_duration(7200) == "2h 00m"

    def test_zero(self) -> None:
        assert format_duration(0) == "0s"


class TestGetConsole:
    def test_writes_to_file(self) -> None:
        buf = io.StringIO()
        get_console(no_color=True, file=buf).print("hello")
        assert buf.getvalue() == "hello\n"


# ---------------------------------------------------------------------------
# CLI group — help and structure
# ---------------------------------------------------------------------------


class TestCliGroup:
    def test_help_output(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "keyline" in result.output
        assert "run" in result.output

    def test_global_flags(self) -> None:
        result = CliRunner().invoke(cli, ["--help"])
        for flag in ("--quiet", "--verbose", "--no-color"):
            assert flag in result.output

    def test_run_help(self) -> None:
        result = CliRunner().invoke(cli, ["run", "--help"])
        assert result.exit_code == 0
        for flag in ("--prompt", "--capacity", "--no-raw", "--branding-file"):
            assert flag in result.output

    def test_bad_capacity_rejected(self) -> None:
        result = CliRunner().invoke(cli, ["run", "--capacity", "lots"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# Piped sessions
# ---------------------------------------------------------------------------


class TestPipedSession:
    def test_echo(self) -> None:
        result = CliRunner().invoke(cli, ["--no-color"], input="echo hi\n")
        assert result.exit_code == 0
        assert "hi" in result.output

    def test_run_subcommand(self) -> None:
        result = CliRunner().invoke(cli, ["run", "--capacity", "4"], input="echo a b\n")
        assert result.exit_code == 0
        assert "a b" in result.output

    def test_unknown_command_reported(self) -> None:
        result = CliRunner().invoke(cli, ["--no-color"], input="frobnicate\necho still\n")
        assert result.exit_code == 0
        assert "Command not found: frobnicate" in result.output
        assert "still" in result.output

    def test_exit_stops_reading(self) -> None:
        result = CliRunner().invoke(cli, [], input="echo one\nexit\necho two\n")
        assert result.exit_code == 0
        assert "one" in result.output
        assert "two" not in result.output

    def test_stats(self) -> None:
        result = CliRunner().invoke(cli, [], input="echo x\nstats\n")
        assert result.exit_code == 0
        assert "counters" in result.output
        assert "commands_total" in result.output

    def test_config_error(self) -> None:
        result = CliRunner().invoke(cli, [], input="", env={"KEYLINE_LOG_LEVEL": "LOUD"})
        assert result.exit_code == 2
        assert "Config error" in result.output


class TestRunRepl:
    def test_explicit_streams(self) -> None:
        stdout, stderr = io.StringIO(), io.StringIO()
        code = run_repl(
            {"no_color": True},
            stdin=io.BytesIO(b"set NAME ada\necho hello ${NAME}\nnope\n"),
            stdout=stdout,
            stderr=stderr,
        )
        assert code == 0
        assert "hello ada" in stdout.getvalue()
        assert "Command not found: nope" in stderr.getvalue()

    def test_no_welcome_when_piped(self) -> None:
        stdout, stderr = io.StringIO(), io.StringIO()
        run_repl({}, stdin=io.BytesIO(b""), stdout=stdout, stderr=stderr)
        assert "Ctrl-D" not in stdout.getvalue()
        assert stdout.getvalue() == ""
