"""Release phase execution.

``PhaseExecutor`` runs a ``ReleasePlan``:

1. each release command, in order, one at a time; the first one that
   cannot be spawned or exits non-zero stops the plan
2. the release-build command, if any, only when every release command
   succeeded
3. on release-build success, the output directory is packed and stored
   under the release id; an absent or empty directory is only a warning

Commands get the parent environment plus ``RELEASE_BUILD_OUTPUT_DIR``.
Each runs in a fresh process, so environment changes made by one command
are not seen by the next, and files they write carry no persistence
guarantee.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from relphase.artifacts.errors import StoreError
from relphase.artifacts.factory import open_store
from relphase.artifacts.store import ArtifactStore, StoredArtifact
from relphase.core.result import Err, Ok, Result
from relphase.core.settings import ConfigError, Settings
from relphase.platform.files import dir_has_files
from relphase.platform.process import stream_run
from relphase.release.errors import (
    ArtifactSaveFailed,
    CommandExited,
    CommandSpawnFailed,
    Phase,
    ReleaseFailure,
)
from relphase.release.model import CommandEntry, ReleasePlan

if TYPE_CHECKING:
    from relphase.output.console import ConsoleProtocol

__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "OUTPUT_DIR_VAR",
    "ArtifactTarget",
    "ExecutionReport",
    "PhaseExecutor",
    "prepare_target",
]

DEFAULT_OUTPUT_DIR = Path("static-artifacts")

OUTPUT_DIR_VAR = "RELEASE_BUILD_OUTPUT_DIR"


@dataclass(frozen=True, slots=True)
class ArtifactTarget:
    """Where the release-build output goes."""

    store: ArtifactStore
    release_id: str


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    """What a successful run did.

    Attributes:
        executed: Commands run, in order (release-build last, if any)
        artifact: Archive stored from the release-build output, if any
    """

    executed: tuple[CommandEntry, ...]
    artifact: StoredArtifact | None = None


def prepare_target(
    settings: Settings,
    *,
    store: ArtifactStore | None = None,
) -> Result[ArtifactTarget, ConfigError]:
    """Validate everything a release-build upload needs, before running anything."""
    release_id = settings.require_release_id()
    if isinstance(release_id, Err):
        return release_id
    if store is None:
        opened = open_store(settings)
        if isinstance(opened, Err):
            return opened
        store = opened.value
    return Ok(ArtifactTarget(store=store, release_id=release_id.value))


class PhaseExecutor:
    """Sequential, fail-fast runner for a release plan."""

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        cwd: Path,
        env: Mapping[str, str],
        output_dir: Path = DEFAULT_OUTPUT_DIR,
        target: ArtifactTarget | None = None,
    ) -> None:
        self._console = console
        self._cwd = cwd
        self._output_dir = output_dir if output_dir.is_absolute() else cwd / output_dir
        self._env = {**env, OUTPUT_DIR_VAR: str(self._output_dir)}
        self._target = target

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def execute(self, plan: ReleasePlan) -> Result[ExecutionReport, ReleaseFailure]:
        if plan.release_build is not None and self._target is None:
            return Err(
                ArtifactSaveFailed(
                    StoreError(kind="config", operation="put", message="no artifact store is configured")
                )
            )

        executed: list[CommandEntry] = []

        for index, entry in enumerate(plan.release, start=1):
            self._console.info(f"executing release command: {entry.display()}")
            ran = self._run("release", f"release[{index}]", entry)
            if isinstance(ran, Err):
                return ran
            executed.append(entry)

        if plan.release_build is None:
            return Ok(ExecutionReport(executed=tuple(executed)))

        entry = plan.release_build
        self._console.info(f"executing release-build command: {entry.display()}")
        ran = self._run("release-build", "release-build", entry)
        if isinstance(ran, Err):
            return ran
        executed.append(entry)

        saved = self._save_output()
        if isinstance(saved, Err):
            return saved
        return Ok(ExecutionReport(executed=tuple(executed), artifact=saved.value))

    def _run(self, phase: Phase, label: str, entry: CommandEntry) -> Result[None, ReleaseFailure]:
        def sink(line: str, is_stderr: bool) -> None:
            self._console.stream(label, line, stderr=is_stderr)

        result = stream_run(entry.argv, cwd=self._cwd, env=self._env, sink=sink)
        if isinstance(result, Err):
            error = result.error
            if not error.spawned:
                return Err(CommandSpawnFailed(phase=phase, entry=entry, detail=error.detail))
            return Err(CommandExited(phase=phase, entry=entry, returncode=error.returncode))
        return Ok(None)

    def _save_output(self) -> Result[StoredArtifact | None, ReleaseFailure]:
        assert self._target is not None
        if not dir_has_files(self._output_dir):
            self._console.warning(
                f"release-build produced no files in {self._output_dir}; no artifact saved"
            )
            return Ok(None)

        target = self._target
        self._console.info(f"saving {self._output_dir} to {target.store.location.describe()}")
        stored = target.store.put(self._output_dir, target.release_id)
        if isinstance(stored, Err):
            return Err(ArtifactSaveFailed(stored.error))

        artifact = stored.value
        self._console.success(f"saved {artifact.files_count} files as {artifact.key}")
        return Ok(artifact)
