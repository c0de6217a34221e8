"""Result type for explicit error handling.

Every operation that can fail for an expected reason (bad configuration, a
command exiting non-zero, a missing artifact) returns ``Ok(value)`` or
``Err(error)`` instead of raising. Callers branch with ``isinstance`` or
``match``:

    match store.get(release_id, dest):
        case Ok(artifact):
            console.success(artifact.key)
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful result holding ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed result holding ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
