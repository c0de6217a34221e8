"""Static artifact packaging, storage and retrieval."""

from .archive import PackResult, UnpackResult, pack_directory, unpack_archive
from .errors import ArchiveError, StoreError
from .factory import open_store
from .location import (
    ArtifactLocation,
    FilesystemLocation,
    ObjectStoreLocation,
    archive_name,
    parse_location,
)
from .retrieval import load_release_artifacts
from .store import ArtifactInfo, ArtifactStore, StoredArtifact

__all__ = [
    # archive
    "PackResult",
    "UnpackResult",
    "pack_directory",
    "unpack_archive",
    # errors
    "ArchiveError",
    "StoreError",
    # location
    "ArtifactLocation",
    "FilesystemLocation",
    "ObjectStoreLocation",
    "archive_name",
    "parse_location",
    # store
    "ArtifactInfo",
    "ArtifactStore",
    "StoredArtifact",
    "open_store",
    # retrieval
    "load_release_artifacts",
]
