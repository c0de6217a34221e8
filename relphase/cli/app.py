from __future__ import annotations

import typer

from relphase import __version__
from relphase.cli.commands.artifacts_cmd import gc, list_artifacts, load, save
from relphase.cli.commands.exec_cmd import exec_
from relphase.cli.commands.plan_cmd import plan


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Release phase
app.command()(plan)
app.command("exec")(exec_)

# Artifacts
app.command()(save)
app.command()(load)
app.command("list")(list_artifacts)
app.command()(gc)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
