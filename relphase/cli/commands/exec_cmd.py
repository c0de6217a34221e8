"""Exec command - run the release phase from a plan file."""

from __future__ import annotations

from pathlib import Path

import typer

from relphase.cli.commands._helpers import exit_with_code, settings_or_exit
from relphase.cli.context import build_context
from relphase.core.errors import ErrorCode
from relphase.core.result import Err
from relphase.core.settings import DEFAULT_METADATA_DIR
from relphase.output.errors import (
    declaration_error_exit_code,
    print_config_error,
    print_release_failure,
    release_failure_exit_code,
)
from relphase.platform.process import raise_on_sigterm
from relphase.release.executor import DEFAULT_OUTPUT_DIR, ArtifactTarget, PhaseExecutor, prepare_target
from relphase.release.plan_file import DEFAULT_PLAN_FILE, read_plan_file

# Conventional exit status for a run interrupted by a signal
INTERRUPTED_EXIT_CODE = 130


def exec_(
    plan_file: Path = typer.Argument(Path(DEFAULT_PLAN_FILE), help="Plan file written by `plan`"),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR,
        "--output-dir",
        help="Directory the release-build command writes its output to",
    ),
    metadata_dir: Path = typer.Option(
        DEFAULT_METADATA_DIR,
        "--metadata-dir",
        help="Directory holding the platform-provided release_id file",
    ),
) -> None:
    """Run release commands, then the release-build command, then store its output."""
    ctx = build_context()

    plan_path = plan_file if plan_file.is_absolute() else ctx.cwd / plan_file
    if not plan_path.exists():
        ctx.console.warning("No release commands are configured.")
        return

    loaded = read_plan_file(path=plan_path)
    if isinstance(loaded, Err):
        ctx.console.error(loaded.error.pretty())
        exit_with_code(declaration_error_exit_code(loaded.error))
    plan = loaded.value

    if plan.is_empty:
        ctx.console.warning("No release commands are configured.")
        return

    target: ArtifactTarget | None = None
    if plan.release_build is not None:
        settings = settings_or_exit(ctx, metadata_dir)
        prepared = prepare_target(settings)
        if isinstance(prepared, Err):
            print_config_error(prepared.error, ctx.console)
            exit_with_code(int(ErrorCode.CONFIG_ERROR))
        target = prepared.value

    executor = PhaseExecutor(
        console=ctx.console,
        cwd=ctx.cwd,
        env=ctx.environ,
        output_dir=output_dir,
        target=target,
    )

    raise_on_sigterm()
    try:
        result = executor.execute(plan)
    except KeyboardInterrupt:
        ctx.console.error("release phase interrupted")
        exit_with_code(INTERRUPTED_EXIT_CODE)

    if isinstance(result, Err):
        print_release_failure(result.error, ctx.console)
        exit_with_code(release_failure_exit_code(result.error))

    ctx.console.success(f"release phase complete: {len(result.value.executed)} commands run")
