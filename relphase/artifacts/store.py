"""Artifact store interface.

A store keeps one archive per release, named ``release-<id>.tgz``, flat
under its root. The filesystem and S3 backends behave the same from the
caller's side; which one is used is decided once, by ``open_store``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Protocol

from relphase.artifacts.errors import StoreError
from relphase.artifacts.location import ArtifactLocation
from relphase.core.result import Err, Ok, Result
from relphase.core.settings import validate_release_id

__all__ = ["ArtifactInfo", "ArtifactStore", "StoredArtifact", "checked_release_id", "select_stale"]

DEFAULT_GC_KEEP = 2


@dataclass(frozen=True, slots=True)
class StoredArtifact:
    """An archive that was written to or read from a store.

    Attributes:
        release_id: Release the archive belongs to
        key: File path or object key of the archive
        location: Store the archive lives in
        files_count: Files packed or unpacked
        size: Archive size in bytes
    """

    release_id: str
    key: str
    location: ArtifactLocation
    files_count: int
    size: int


@dataclass(frozen=True, slots=True)
class ArtifactInfo:
    """One archive found by ``list``."""

    key: str
    release_id: str
    size: int
    modified: datetime


class ArtifactStore(Protocol):
    """Uniform put/get/list over a storage backend."""

    @property
    def location(self) -> ArtifactLocation: ...

    def put(self, source_dir: Path, release_id: str) -> Result[StoredArtifact, StoreError]:
        """Pack ``source_dir`` and store it as the release's archive."""
        ...

    def get(self, release_id: str, dest_dir: Path) -> Result[StoredArtifact, StoreError]:
        """Fetch the release's archive and unpack it into ``dest_dir``."""
        ...

    def list(self) -> Result[list[ArtifactInfo], StoreError]:
        """All release archives, newest first."""
        ...

    def gc(self, keep: int = DEFAULT_GC_KEEP) -> Result[list[ArtifactInfo], StoreError]:
        """Delete all but the ``keep`` newest archives; return what was deleted."""
        ...


def checked_release_id(operation: str, release_id: str) -> Result[str, StoreError]:
    checked = validate_release_id(release_id)
    if isinstance(checked, Err):
        return Err(StoreError(kind="config", operation=operation, message=checked.error.message))
    return Ok(checked.value)


def select_stale(infos: list[ArtifactInfo], keep: int) -> list[ArtifactInfo]:
    """Archives beyond the ``keep`` newest."""
    ordered = sorted(infos, key=lambda i: i.modified, reverse=True)
    return ordered[max(keep, 0) :]
