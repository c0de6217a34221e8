"""Startup retrieval of a release's static artifacts.

Runs before the served process starts handling requests: finds the archive
for the current release and unpacks it into the serving directory. There is
a single attempt and no fallback to another release; any failure must stop
the startup sequence.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from relphase.artifacts.errors import StoreError
from relphase.artifacts.factory import open_store
from relphase.artifacts.store import ArtifactStore, StoredArtifact
from relphase.core.result import Err, Ok, Result
from relphase.core.settings import ConfigError, Settings
from relphase.platform.files import atomic_write_text

if TYPE_CHECKING:
    from relphase.output.console import ConsoleProtocol

__all__ = [
    "DEFAULT_ARTIFACTS_DIR",
    "LOADED_FROM_KEY_VAR",
    "RetrievalError",
    "load_release_artifacts",
    "write_exec_d_output",
]

DEFAULT_ARTIFACTS_DIR = Path("static-artifacts")

LOADED_FROM_KEY_VAR = "STATIC_ARTIFACTS_LOADED_FROM_KEY"

type RetrievalError = ConfigError | StoreError


def load_release_artifacts(
    settings: Settings,
    dest: Path,
    *,
    console: ConsoleProtocol,
    store: ArtifactStore | None = None,
) -> Result[StoredArtifact, RetrievalError]:
    """Download and unpack the current release's archive into ``dest``.

    Args:
        settings: Settings captured at startup
        dest: Serving directory to unpack into
        console: Progress output
        store: Store to read from (opened from settings if None)

    Returns:
        Ok(StoredArtifact) on success; Err(ConfigError) when the release id
        or storage configuration is missing, Err(StoreError) when the
        archive cannot be fetched or unpacked.
    """
    release_id = settings.require_release_id()
    if isinstance(release_id, Err):
        return release_id

    if store is None:
        opened = open_store(settings)
        if isinstance(opened, Err):
            return opened
        store = opened.value

    console.info(f"loading release artifacts for {release_id.value} from {store.location.describe()}")
    fetched = store.get(release_id.value, dest)
    if isinstance(fetched, Err):
        return fetched

    artifact = fetched.value
    console.success(f"unpacked {artifact.files_count} files from {artifact.key} into {dest}")
    return Ok(artifact)


def write_exec_d_output(path: Path, values: dict[str, str]) -> None:
    """Write ``KEY = "value"`` lines, the TOML form exec.d programs emit."""
    lines = [f"{key} = {json.dumps(value)}" for key, value in sorted(values.items())]
    atomic_write_text(path, "\n".join(lines) + "\n")
