"""Narrowing helpers for untyped TOML/JSON data.

Declaration files and plan files are parsed into plain dicts and lists.
These helpers validate shapes at that boundary so the rest of the code only
sees typed values.
"""

from __future__ import annotations

from typing import Mapping, Sequence, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def as_str_list(obj: object) -> list[str] | None:
    """Return obj as a list of strings, or None if any item is not a str."""
    items = as_obj_list(obj)
    if items is None:
        return None
    out: list[str] = []
    for item in items:
        if not isinstance(item, str):
            return None
        out.append(item)
    return out


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value from a mapping, stripping whitespace.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value




def select(table: Mapping[str, object], path: Sequence[str]) -> object | None:
    """Walk nested tables along ``path`` and return the value found, if any."""
    current: object = table
    for key in path:
        d = as_str_dict(current)
        if d is None or key not in d:
            return None
        current = d[key]
    return current
