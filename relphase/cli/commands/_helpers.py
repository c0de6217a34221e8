"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from relphase.artifacts.factory import open_store
from relphase.artifacts.store import ArtifactStore
from relphase.core.errors import ErrorCode
from relphase.core.result import Err
from relphase.core.settings import Settings, capture_env, load_settings
from relphase.output.errors import print_config_error

if TYPE_CHECKING:
    from relphase.cli.context import CLIContext


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)


def settings_or_exit(ctx: CLIContext, metadata_dir: Path) -> Settings:
    """Capture the environment once and build Settings, or exit with a config error."""
    loaded = load_settings(capture_env(ctx.environ, metadata_dir))
    if isinstance(loaded, Err):
        print_config_error(loaded.error, ctx.console)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))
    return loaded.value


def store_or_exit(ctx: CLIContext, settings: Settings) -> ArtifactStore:
    opened = open_store(settings)
    if isinstance(opened, Err):
        print_config_error(opened.error, ctx.console)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))
    return opened.value


def release_id_or_exit(ctx: CLIContext, settings: Settings) -> str:
    release_id = settings.require_release_id()
    if isinstance(release_id, Err):
        print_config_error(release_id.error, ctx.console)
        exit_with_code(int(ErrorCode.CONFIG_ERROR))
    return release_id.value
