from __future__ import annotations

import json
from pathlib import Path

from relphase.core.result import Err, Ok, Result
from relphase.core.structured import as_obj_list, as_str_dict, get_int
from relphase.platform.files import atomic_write_text
from relphase.release.declarations import parse_entry
from relphase.release.errors import DeclarationError
from relphase.release.model import CommandEntry, ReleasePlan

PLAN_SCHEMA = 1

DEFAULT_PLAN_FILE = "release-commands.json"


def _entry_payload(entry: CommandEntry) -> dict[str, object]:
    payload: dict[str, object] = {"command": entry.program, "args": list(entry.arguments)}
    if entry.source is not None:
        payload["source"] = entry.source
    return payload


def write_plan_file(*, path: Path, plan: ReleasePlan) -> Result[None, DeclarationError]:
    payload: dict[str, object] = {
        "schema": PLAN_SCHEMA,
        "release": [_entry_payload(e) for e in plan.release],
        "release-build": _entry_payload(plan.release_build) if plan.release_build else None,
    }

    try:
        atomic_write_text(path, json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        return Err(DeclarationError(f"failed to write plan file: {e}", path=path, unreadable=True))

    return Ok(None)


def read_plan_file(*, path: Path) -> Result[ReleasePlan, DeclarationError]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(DeclarationError(f"failed to read plan file: {e}", path=path, unreadable=True))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(DeclarationError(f"invalid JSON in plan file: {e}", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(DeclarationError("plan file root must be a JSON object", path=path))

    schema = get_int(data, "schema")
    if schema != PLAN_SCHEMA:
        return Err(DeclarationError(f"unsupported plan schema: {schema}", path=path))

    items = as_obj_list(data.get("release", []))
    if items is None:
        return Err(DeclarationError("release must be a list", path=path))

    release: list[CommandEntry] = []
    for item in items:
        entry = parse_entry(item, path=path)
        if isinstance(entry, Err):
            return entry
        release.append(entry.value)

    release_build: CommandEntry | None = None
    raw_build = data.get("release-build")
    if raw_build is not None:
        entry = parse_entry(raw_build, path=path)
        if isinstance(entry, Err):
            return entry
        release_build = entry.value

    return Ok(ReleasePlan(release=tuple(release), release_build=release_build))
