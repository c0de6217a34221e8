"""Tests for relphase.core.structured module."""

from relphase.core.structured import (
    as_obj_list,
    as_str_dict,
    as_str_list,
    get_int,
    get_str,
    select,
)


def test_as_str_dict() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict([1]) is None


def test_as_obj_list_and_str_list() -> None:
    assert as_obj_list([1, "a"]) == [1, "a"]
    assert as_obj_list("a") is None
    assert as_str_list(["a", "b"]) == ["a", "b"]
    assert as_str_list(["a", 1]) is None


def test_get_helpers() -> None:
    table: dict[str, object] = {"s": "  x ", "blank": " ", "n": 3, "b": True}
    assert get_str(table, "s") == "x"
    assert get_str(table, "blank") is None
    assert get_str(table, "n") is None
    assert get_int(table, "n") == 3
    assert get_int(table, "b") is None


def test_select_nested() -> None:
    table: dict[str, object] = {"com": {"heroku": {"phase": {"release": []}}}}
    assert select(table, ("com", "heroku", "phase")) == {"release": []}
    assert select(table, ("com", "missing")) is None
    assert select(table, ("com", "heroku", "phase", "release", "x")) is None
