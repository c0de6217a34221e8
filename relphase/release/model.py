"""Release command model."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["CommandDeclarations", "CommandEntry", "ReleasePlan"]


@dataclass(frozen=True, slots=True)
class CommandEntry:
    """One executable unit.

    Attributes:
        program: Executable name or path
        arguments: Arguments passed verbatim (no shell)
        source: Who declared it, for diagnostics
    """

    program: str
    arguments: tuple[str, ...] = ()
    source: str | None = None

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.arguments]

    def display(self) -> str:
        text = " ".join(self.argv)
        if self.source:
            text += f" ({self.source})"
        return text


@dataclass(frozen=True, slots=True)
class CommandDeclarations:
    """Commands declared by one configuration source.

    ``release_build`` is a tuple because an inherited source may carry
    several contributors' declarations; resolution keeps one.
    """

    release: tuple[CommandEntry, ...] = ()
    release_build: tuple[CommandEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.release and not self.release_build


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    """Resolved execution plan: ordered release commands, at most one build."""

    release: tuple[CommandEntry, ...] = ()
    release_build: CommandEntry | None = None

    @property
    def is_empty(self) -> bool:
        return not self.release and self.release_build is None

    def describe(self) -> list[str]:
        lines = [
            "release-build: "
            + (self.release_build.display() if self.release_build else "None"),
            "release:" + ("" if self.release else " None"),
        ]
        lines.extend(f"  {entry.display()}" for entry in self.release)
        return lines
