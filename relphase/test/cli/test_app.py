"""Tests for the top-level typer app."""

from __future__ import annotations

from typer.testing import CliRunner

from relphase import __version__
from relphase.cli.app import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_commands_registered() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("plan", "exec", "save", "load", "list", "gc"):
        assert name in result.stdout
