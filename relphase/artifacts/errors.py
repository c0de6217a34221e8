"""Error types for artifact packaging and storage."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

__all__ = ["ArchiveError", "StoreError", "StoreErrorKind"]

type StoreErrorKind = Literal["config", "not_found", "network", "permission", "io", "archive"]


@dataclass(frozen=True, slots=True)
class ArchiveError:
    """An archive could not be written or read cleanly.

    Attributes:
        archive: Archive file involved
        message: Human-readable error message
    """

    archive: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message}: {self.archive}"


@dataclass(frozen=True, slots=True)
class StoreError:
    """A store operation failed.

    Attributes:
        kind: Failure category, used for exit codes and hints
        operation: "put", "get", "list" or "gc"
        message: Human-readable error message
        location: Key or path the operation addressed, if known
    """

    kind: StoreErrorKind
    operation: str
    message: str
    location: str | None = None

    def pretty(self) -> str:
        text = f"{self.operation} failed: {self.message}"
        if self.location:
            text += f" ({self.location})"
        return text

    @classmethod
    def from_archive(cls, operation: str, error: ArchiveError) -> StoreError:
        return cls(kind="archive", operation=operation, message=error.message, location=str(error.archive))
