"""Tests for relphase.core.result module."""

import pytest

from relphase.core.result import Err, Ok, Result


class TestOk:
    """Tests for Ok type."""

    def test_create_ok(self) -> None:
        """Ok can be created with a value."""
        assert Ok(42).value == 42

    def test_equality(self) -> None:
        assert Ok(1) == Ok(1)
        assert Ok(1) != Err(1)

    def test_repr(self) -> None:
        assert repr(Ok("a")) == "Ok('a')"


class TestErr:
    """Tests for Err type."""

    def test_create_err(self) -> None:
        assert Err("boom").error == "boom"

    def test_repr(self) -> None:
        assert repr(Err("boom")) == "Err('boom')"

    def test_frozen(self) -> None:
        result = Err("boom")
        with pytest.raises(AttributeError):
            result.error = "other"  # type: ignore[misc]


def test_match() -> None:
    def describe(result: Result[int, str]) -> str:
        match result:
            case Ok(value):
                return f"ok {value}"
            case Err(error):
                return f"err {error}"

    assert describe(Ok(1)) == "ok 1"
    assert describe(Err("x")) == "err x"
