"""Filesystem artifact store (``file://`` URLs)."""

from __future__ import annotations

import errno
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from relphase.artifacts.archive import pack_directory, unpack_archive
from relphase.artifacts.errors import StoreError
from relphase.artifacts.location import FilesystemLocation, archive_name, release_id_from_name
from relphase.artifacts.store import (
    DEFAULT_GC_KEEP,
    ArtifactInfo,
    StoredArtifact,
    checked_release_id,
    select_stale,
)
from relphase.core.result import Err, Ok, Result

__all__ = ["FilesystemStore"]


def _os_error(operation: str, e: OSError, location: Path) -> StoreError:
    if isinstance(e, PermissionError):
        kind = "permission"
    elif e.errno == errno.ENOENT:
        kind = "not_found"
    else:
        kind = "io"
    return StoreError(kind=kind, operation=operation, message=str(e), location=str(location))


class FilesystemStore:
    """Archives stored flat under a local directory."""

    def __init__(self, location: FilesystemLocation) -> None:
        self._location = location

    @property
    def location(self) -> FilesystemLocation:
        return self._location

    @property
    def root(self) -> Path:
        return self._location.root

    def put(self, source_dir: Path, release_id: str) -> Result[StoredArtifact, StoreError]:
        checked = checked_release_id("put", release_id)
        if isinstance(checked, Err):
            return checked
        dest = self._location.archive_path(checked.value)

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=str(self.root))
            os.close(fd)
        except OSError as e:
            return Err(_os_error("put", e, self.root))

        tmp_path = Path(tmp_name)
        try:
            packed = pack_directory(source_dir, tmp_path)
            if isinstance(packed, Err):
                return Err(StoreError.from_archive("put", packed.error))
            os.replace(tmp_path, dest)
        except OSError as e:
            return Err(_os_error("put", e, dest))
        finally:
            tmp_path.unlink(missing_ok=True)

        return Ok(
            StoredArtifact(
                release_id=checked.value,
                key=str(dest),
                location=self._location,
                files_count=packed.value.files_count,
                size=packed.value.size,
            )
        )

    def get(self, release_id: str, dest_dir: Path) -> Result[StoredArtifact, StoreError]:
        checked = checked_release_id("get", release_id)
        if isinstance(checked, Err):
            return checked
        source = self._location.archive_path(checked.value)

        if not source.is_file():
            return Err(
                StoreError(
                    kind="not_found",
                    operation="get",
                    message=f"no archive named {archive_name(checked.value)}",
                    location=str(source),
                )
            )

        unpacked = unpack_archive(source, dest_dir)
        if isinstance(unpacked, Err):
            return Err(StoreError.from_archive("get", unpacked.error))

        try:
            size = source.stat().st_size
        except OSError as e:
            return Err(_os_error("get", e, source))

        return Ok(
            StoredArtifact(
                release_id=checked.value,
                key=str(source),
                location=self._location,
                files_count=unpacked.value.files_count,
                size=size,
            )
        )

    def list(self) -> Result[list[ArtifactInfo], StoreError]:
        if not self.root.is_dir():
            return Ok([])

        infos: list[ArtifactInfo] = []
        try:
            for entry in self.root.iterdir():
                release_id = release_id_from_name(entry.name)
                if release_id is None or entry.is_symlink() or not entry.is_file():
                    continue
                st = entry.stat()
                infos.append(
                    ArtifactInfo(
                        key=str(entry),
                        release_id=release_id,
                        size=st.st_size,
                        modified=datetime.fromtimestamp(st.st_mtime, tz=UTC),
                    )
                )
        except OSError as e:
            return Err(_os_error("list", e, self.root))

        infos.sort(key=lambda i: i.modified, reverse=True)
        return Ok(infos)

    def gc(self, keep: int = DEFAULT_GC_KEEP) -> Result[list[ArtifactInfo], StoreError]:
        listed = self.list()
        if isinstance(listed, Err):
            return Err(StoreError(kind=listed.error.kind, operation="gc", message=listed.error.message))

        deleted: list[ArtifactInfo] = []
        for info in select_stale(listed.value, keep):
            try:
                Path(info.key).unlink(missing_ok=True)
            except OSError as e:
                return Err(_os_error("gc", e, Path(info.key)))
            deleted.append(info)
        return Ok(deleted)
