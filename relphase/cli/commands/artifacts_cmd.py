"""Artifact commands - save, load, list and prune stored release archives."""

from __future__ import annotations

from pathlib import Path

import typer

from relphase.artifacts.retrieval import (
    DEFAULT_ARTIFACTS_DIR,
    LOADED_FROM_KEY_VAR,
    load_release_artifacts,
    write_exec_d_output,
)
from relphase.artifacts.store import DEFAULT_GC_KEEP
from relphase.cli.commands._helpers import (
    exit_with_code,
    release_id_or_exit,
    settings_or_exit,
    store_or_exit,
)
from relphase.cli.context import build_context
from relphase.core.errors import ErrorCode
from relphase.core.result import Err
from relphase.core.settings import DEFAULT_METADATA_DIR, ConfigError
from relphase.output.console import Style
from relphase.output.errors import print_config_error, print_store_error, store_error_exit_code


def save(
    source_dir: Path = typer.Argument(..., help="Directory to package"),
    metadata_dir: Path = typer.Option(
        DEFAULT_METADATA_DIR,
        "--metadata-dir",
        help="Directory holding the platform-provided release_id file",
    ),
) -> None:
    """Package a directory and store it under the current release id."""
    ctx = build_context()
    settings = settings_or_exit(ctx, metadata_dir)
    release_id = release_id_or_exit(ctx, settings)
    store = store_or_exit(ctx, settings)

    source = source_dir if source_dir.is_absolute() else ctx.cwd / source_dir
    if not source.is_dir():
        ctx.console.error(f"not a directory: {source}")
        exit_with_code(int(ErrorCode.IO_ERROR))

    stored = store.put(source, release_id)
    if isinstance(stored, Err):
        print_store_error(stored.error, ctx.console)
        exit_with_code(store_error_exit_code(stored.error))

    artifact = stored.value
    ctx.console.success(
        f"saved {artifact.files_count} files ({artifact.size} bytes) to {artifact.location.describe()}"
    )


def load(
    dest: Path = typer.Option(
        DEFAULT_ARTIFACTS_DIR,
        "--dest",
        help="Directory to unpack the release's artifacts into",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        help=f"Write {LOADED_FROM_KEY_VAR} to this exec.d output file",
    ),
    metadata_dir: Path = typer.Option(
        DEFAULT_METADATA_DIR,
        "--metadata-dir",
        help="Directory holding the platform-provided release_id file",
    ),
) -> None:
    """Fetch and unpack the current release's artifacts. Fails if they are missing."""
    ctx = build_context()
    settings = settings_or_exit(ctx, metadata_dir)

    dest_path = dest if dest.is_absolute() else ctx.cwd / dest
    loaded = load_release_artifacts(settings, dest_path, console=ctx.console)
    if isinstance(loaded, Err):
        error = loaded.error
        if isinstance(error, ConfigError):
            print_config_error(error, ctx.console)
            exit_with_code(int(ErrorCode.CONFIG_ERROR))
        print_store_error(error, ctx.console)
        exit_with_code(store_error_exit_code(error))

    if output is not None:
        try:
            write_exec_d_output(output, {LOADED_FROM_KEY_VAR: loaded.value.key})
        except OSError as e:
            ctx.console.error(f"failed to write {output}: {e}")
            exit_with_code(int(ErrorCode.IO_ERROR))


def list_artifacts(
    metadata_dir: Path = typer.Option(
        DEFAULT_METADATA_DIR,
        "--metadata-dir",
        help="Directory holding the platform-provided release_id file",
    ),
) -> None:
    """List stored release archives, newest first."""
    ctx = build_context()
    settings = settings_or_exit(ctx, metadata_dir)
    store = store_or_exit(ctx, settings)

    listed = store.list()
    if isinstance(listed, Err):
        print_store_error(listed.error, ctx.console)
        exit_with_code(store_error_exit_code(listed.error))

    ctx.console.header(store.location.describe())
    if not listed.value:
        ctx.console.print("no archives", Style.DIM)
        return

    for info in listed.value:
        marker = " (current)" if info.release_id == settings.release_id else ""
        modified = info.modified.strftime("%Y-%m-%d %H:%M:%S")
        ctx.console.print(f"{info.key}  {info.size:>10}  {modified}{marker}")


def gc(
    keep: int = typer.Option(DEFAULT_GC_KEEP, "--keep", min=0, help="Number of newest archives to keep"),
    metadata_dir: Path = typer.Option(
        DEFAULT_METADATA_DIR,
        "--metadata-dir",
        help="Directory holding the platform-provided release_id file",
    ),
) -> None:
    """Delete all but the newest archives."""
    ctx = build_context()
    settings = settings_or_exit(ctx, metadata_dir)
    store = store_or_exit(ctx, settings)

    removed = store.gc(keep)
    if isinstance(removed, Err):
        print_store_error(removed.error, ctx.console)
        exit_with_code(store_error_exit_code(removed.error))

    if not removed.value:
        ctx.console.print("Nothing to remove", Style.DIM)
        return

    for info in removed.value:
        ctx.console.print(f"  {info.key}", Style.DIM)
    ctx.console.success(f"Removed {len(removed.value)} archives")
