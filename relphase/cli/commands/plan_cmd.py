"""Plan command - resolve declared release commands into a plan file."""

from __future__ import annotations

from pathlib import Path

import typer

from relphase.cli.commands._helpers import exit_with_code
from relphase.cli.context import build_context
from relphase.core.result import Err
from relphase.output.console import Style
from relphase.output.errors import declaration_error_exit_code
from relphase.release.declarations import load_build_plan, load_project_declarations
from relphase.release.model import CommandDeclarations
from relphase.release.plan_file import DEFAULT_PLAN_FILE, write_plan_file
from relphase.release.resolver import resolve_plan


def plan(
    project: Path = typer.Option(
        Path("project.toml"),
        "--project",
        help="Project descriptor declaring release commands",
    ),
    build_plan: Path | None = typer.Option(
        None,
        "--build-plan",
        help="Build Plan JSON holding commands inherited from upstream buildpacks",
    ),
    out: Path = typer.Option(
        Path(DEFAULT_PLAN_FILE),
        "--out",
        "-o",
        help="Where to write the resolved plan",
    ),
) -> None:
    """Resolve release commands and write the execution plan."""
    ctx = build_context()

    project_path = project if project.is_absolute() else ctx.cwd / project
    local = load_project_declarations(project_path)
    if isinstance(local, Err):
        ctx.console.error(local.error.pretty())
        exit_with_code(declaration_error_exit_code(local.error))

    inherited = CommandDeclarations()
    if build_plan is not None:
        plan_path = build_plan if build_plan.is_absolute() else ctx.cwd / build_plan
        loaded = load_build_plan(plan_path)
        if isinstance(loaded, Err):
            ctx.console.error(loaded.error.pretty())
            exit_with_code(declaration_error_exit_code(loaded.error))
        inherited = loaded.value

    resolved = resolve_plan(inherited, local.value)
    if resolved.is_empty:
        ctx.console.warning("No release commands are configured.")
        return

    out_path = out if out.is_absolute() else ctx.cwd / out
    written = write_plan_file(path=out_path, plan=resolved)
    if isinstance(written, Err):
        ctx.console.error(written.error.pretty())
        exit_with_code(declaration_error_exit_code(written.error))

    ctx.console.header("Release plan")
    for line in resolved.describe():
        ctx.console.print(line, Style.DIM)
    ctx.console.success(f"plan written: {out_path}")
