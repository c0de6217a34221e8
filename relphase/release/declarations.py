"""Loading release command declarations.

Two sources declare commands:

- the project, in ``project.toml`` under ``[com.heroku.phase]``:

      [[com.heroku.phase.release]]
      command = "bash"
      args = ["-c", "rake db:migrate"]

      [com.heroku.phase.release-build]
      command = "npm"
      args = ["run", "build"]

- the Build Plan, a JSON list of metadata tables contributed by upstream
  buildpacks, each of which may hold ``release`` and ``release-build`` with
  the same shape.

Both become ``CommandDeclarations``; precedence is applied later by the
resolver.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path

from relphase.core.result import Err, Ok, Result
from relphase.core.structured import as_obj_list, as_str_dict, as_str_list, get_str, select
from relphase.release.errors import DeclarationError
from relphase.release.model import CommandDeclarations, CommandEntry

__all__ = [
    "PROJECT_TABLE",
    "declarations_from_build_plan",
    "load_build_plan",
    "load_project_declarations",
    "parse_declarations",
    "parse_entry",
]

PROJECT_TABLE = ("com", "heroku", "phase")

RELEASE_KEY = "release"
RELEASE_BUILD_KEY = "release-build"


def parse_entry(
    obj: object,
    *,
    default_source: str | None = None,
    path: Path | None = None,
) -> Result[CommandEntry, DeclarationError]:
    """Parse one ``{command, args, source}`` table.

    ``command`` and ``args`` are passed through verbatim.
    """
    table = as_str_dict(obj)
    if table is None:
        return Err(DeclarationError("each command must be a table", path=path))

    command = table.get("command")
    if not isinstance(command, str) or not command:
        return Err(DeclarationError("command entry is missing `command`", path=path))

    args: list[str] = []
    if "args" in table:
        parsed = as_str_list(table["args"])
        if parsed is None:
            return Err(DeclarationError(f"`args` of {command!r} must be a list of strings", path=path))
        args = parsed

    return Ok(
        CommandEntry(
            program=command,
            arguments=tuple(args),
            source=get_str(table, "source") or default_source,
        )
    )


def parse_declarations(
    table: Mapping[str, object],
    *,
    default_source: str | None = None,
    path: Path | None = None,
) -> Result[CommandDeclarations, DeclarationError]:
    """Parse a table holding optional ``release`` and ``release-build`` keys."""
    release: list[CommandEntry] = []
    if RELEASE_KEY in table:
        items = as_obj_list(table[RELEASE_KEY])
        if items is None:
            return Err(
                DeclarationError("Configuration of `release` must be an array of commands.", path=path)
            )
        for item in items:
            entry = parse_entry(item, default_source=default_source, path=path)
            if isinstance(entry, Err):
                return entry
            release.append(entry.value)

    release_build: list[CommandEntry] = []
    if RELEASE_BUILD_KEY in table:
        raw = table[RELEASE_BUILD_KEY]
        if as_str_dict(raw) is None:
            return Err(
                DeclarationError("Configuration of `release-build` must be a single command.", path=path)
            )
        entry = parse_entry(raw, default_source=default_source, path=path)
        if isinstance(entry, Err):
            return entry
        release_build.append(entry.value)

    return Ok(CommandDeclarations(release=tuple(release), release_build=tuple(release_build)))


def declarations_from_build_plan(
    contributions: list[object],
    *,
    default_source: str | None = "build plan",
    path: Path | None = None,
) -> Result[CommandDeclarations, DeclarationError]:
    """Combine the metadata tables of several Build Plan contributors.

    Release arrays are appended in contributor order. Every contributed
    release-build is kept, in order, so the resolver can pick the last.
    """
    release: list[CommandEntry] = []
    release_build: list[CommandEntry] = []
    for contribution in contributions:
        table = as_str_dict(contribution)
        if table is None:
            return Err(DeclarationError("Build Plan entries must be tables", path=path))
        parsed = parse_declarations(table, default_source=default_source, path=path)
        if isinstance(parsed, Err):
            return parsed
        release.extend(parsed.value.release)
        release_build.extend(parsed.value.release_build)
    return Ok(CommandDeclarations(release=tuple(release), release_build=tuple(release_build)))


def load_project_declarations(
    path: Path,
    *,
    default_source: str | None = "project.toml",
) -> Result[CommandDeclarations, DeclarationError]:
    """Read the project's declarations. A missing file declares nothing."""
    if not path.is_file():
        return Ok(CommandDeclarations())

    try:
        data: object = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(DeclarationError(f"Failure reading project file: {e}", path=path, unreadable=True))
    except UnicodeDecodeError as e:
        return Err(DeclarationError(f"Failure reading project file: {e}", path=path, unreadable=True))
    except tomllib.TOMLDecodeError as e:
        return Err(DeclarationError(f"Invalid TOML syntax: {e}", path=path))

    root = as_str_dict(data) or {}
    phase = select(root, PROJECT_TABLE)
    if phase is None:
        return Ok(CommandDeclarations())
    table = as_str_dict(phase)
    if table is None:
        return Err(DeclarationError(f"`{'.'.join(PROJECT_TABLE)}` must be a table", path=path))
    return parse_declarations(table, default_source=default_source, path=path)


def load_build_plan(path: Path) -> Result[CommandDeclarations, DeclarationError]:
    """Read inherited declarations from a Build Plan JSON file.

    The file holds a list of metadata tables; a single table is accepted as
    a one-item list. A missing file declares nothing.
    """
    if not path.is_file():
        return Ok(CommandDeclarations())

    try:
        data: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(DeclarationError(f"Failure reading Build Plan: {e}", path=path, unreadable=True))
    except json.JSONDecodeError as e:
        return Err(DeclarationError(f"Invalid JSON in Build Plan: {e}", path=path))

    contributions = as_obj_list(data)
    if contributions is None:
        if as_str_dict(data) is None:
            return Err(DeclarationError("Build Plan must be a list of tables", path=path))
        contributions = [data]
    return declarations_from_build_plan(contributions, path=path)
