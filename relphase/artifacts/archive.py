"""Archive packing and unpacking.

Artifacts are gzip-compressed tar archives of a directory's regular files.
Packing is deterministic: members are sorted by path and carry no
timestamps or ownership, and the gzip header has a zero mtime, so the same
tree always gives the same bytes.

Unpacking only writes regular files, and refuses absolute names, ``..``
components, and anything that would land outside the destination.

Limitations: empty directories are not recorded, and mode bits are
restored best effort only.
"""

from __future__ import annotations

import contextlib
import gzip
import os
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from relphase.artifacts.errors import ArchiveError
from relphase.core.result import Err, Ok, Result

__all__ = ["PackResult", "UnpackResult", "pack_directory", "unpack_archive"]


@dataclass(frozen=True, slots=True)
class PackResult:
    """Result of packing a directory.

    Attributes:
        archive: Path of the archive written
        files_count: Number of files stored
        size: Archive size in bytes
    """

    archive: Path
    files_count: int
    size: int


@dataclass(frozen=True, slots=True)
class UnpackResult:
    """Result of unpacking an archive.

    Attributes:
        dest: Directory the files were written to
        files_count: Number of files extracted
    """

    dest: Path
    files_count: int


def _iter_files(source: Path) -> list[tuple[str, Path]]:
    """Regular files under source as (posix relative name, path), sorted by name."""
    found: list[tuple[str, Path]] = []
    for dirpath, dirnames, filenames in os.walk(source, followlinks=False):
        dirnames.sort()
        base = Path(dirpath)
        for name in filenames:
            path = base / name
            if path.is_symlink() or not path.is_file():
                continue
            found.append((path.relative_to(source).as_posix(), path))
    found.sort(key=lambda item: item[0])
    return found


def pack_directory(source: Path, dest: Path) -> Result[PackResult, ArchiveError]:
    """Pack every regular file under ``source`` into ``dest`` (.tgz).

    Args:
        source: Directory to pack
        dest: Archive path to create (parent must exist)

    Returns:
        Ok with PackResult, or Err with ArchiveError
    """
    if not source.is_dir():
        return Err(ArchiveError(archive=dest, message=f"Source directory not found: {source}"))

    try:
        files = _iter_files(source)
        with (
            open(dest, "wb") as raw,
            gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz,
            tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tar,
        ):
            for name, path in files:
                st = path.stat()
                info = tarfile.TarInfo(name=name)
                info.size = st.st_size
                info.mode = st.st_mode & 0o777
                info.mtime = 0
                info.uid = info.gid = 0
                info.uname = info.gname = ""
                with open(path, "rb") as fh:
                    tar.addfile(info, fh)
        size = dest.stat().st_size
    except (OSError, tarfile.TarError) as e:
        return Err(ArchiveError(archive=dest, message=f"Archive creation failed: {e}"))

    return Ok(PackResult(archive=dest, files_count=len(files), size=size))


def _safe_relative_path(member_name: str) -> Path | None:
    """Return a sanitized relative extraction path, or None if unsafe."""
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = [p for p in PurePosixPath(normalized).parts if p != "."]
    if not parts:
        return None
    if any(part in {"", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None

    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root)
    except OSError:
        return False


def unpack_archive(archive: Path, dest: Path) -> Result[UnpackResult, ArchiveError]:
    """Extract a .tgz archive into ``dest``, creating it if needed.

    Existing files with the same names are overwritten; other files in
    ``dest`` are left alone.
    """
    if not archive.is_file():
        return Err(ArchiveError(archive=archive, message="Archive not found"))

    try:
        dest.mkdir(parents=True, exist_ok=True)
        root = dest.resolve()
        files_count = 0

        with tarfile.open(archive, "r:gz") as tar:
            for member in tar:
                if not member.isreg():
                    continue

                rel_path = _safe_relative_path(member.name)
                if rel_path is None:
                    continue

                full_path = dest / rel_path
                if not _is_within_root(root, full_path):
                    continue

                src = tar.extractfile(member)
                if src is None:
                    continue

                full_path.parent.mkdir(parents=True, exist_ok=True)
                with src, open(full_path, "wb") as out:
                    shutil.copyfileobj(src, out)

                mode = member.mode & 0o777
                if mode:
                    with contextlib.suppress(OSError):
                        os.chmod(full_path, mode)

                files_count += 1

    except (tarfile.TarError, EOFError) as e:
        return Err(ArchiveError(archive=archive, message=f"Archive is corrupt: {e}"))
    except OSError as e:
        return Err(ArchiveError(archive=archive, message=f"Archive extraction failed: {e}"))

    return Ok(UnpackResult(dest=dest, files_count=files_count))
