"""Error types for the release domain."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from relphase.artifacts.errors import StoreError
from relphase.release.model import CommandEntry

type Phase = Literal["release", "release-build"]


@dataclass(frozen=True, slots=True)
class DeclarationError:
    """A declaration or plan file could not be read or has the wrong shape."""

    message: str
    path: Path | None = None
    unreadable: bool = False

    def pretty(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class CommandSpawnFailed:
    phase: Phase
    entry: CommandEntry
    detail: str


@dataclass(frozen=True, slots=True)
class CommandExited:
    phase: Phase
    entry: CommandEntry
    returncode: int


@dataclass(frozen=True, slots=True)
class ArtifactSaveFailed:
    error: StoreError


ReleaseFailure = CommandSpawnFailed | CommandExited | ArtifactSaveFailed
