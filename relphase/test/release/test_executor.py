"""Tests for relphase.release.executor module."""

from __future__ import annotations

import os
import signal
import sys
import tarfile
import time
from pathlib import Path

from relphase.artifacts.fs_store import FilesystemStore
from relphase.artifacts.location import FilesystemLocation
from relphase.core.result import Err, Ok
from relphase.core.settings import Settings
from relphase.output.console import MockConsole
from relphase.release.errors import ArtifactSaveFailed, CommandExited, CommandSpawnFailed
from relphase.release.executor import (
    OUTPUT_DIR_VAR,
    ArtifactTarget,
    PhaseExecutor,
    prepare_target,
)
from relphase.release.model import CommandEntry, ReleasePlan


def py(code: str) -> CommandEntry:
    return CommandEntry(sys.executable, ("-c", code))


def touch(marker: Path) -> CommandEntry:
    return py(f"open({str(marker)!r}, 'w').close()")


def _executor(
    tmp_path: Path,
    console: MockConsole,
    *,
    target: ArtifactTarget | None = None,
) -> PhaseExecutor:
    return PhaseExecutor(
        console=console,
        cwd=tmp_path,
        env=dict(os.environ),
        output_dir=Path("static-artifacts"),
        target=target,
    )


def _target(tmp_path: Path, release_id: str = "rel-42") -> ArtifactTarget:
    store = FilesystemStore(FilesystemLocation(tmp_path / "store"))
    return ArtifactTarget(store=store, release_id=release_id)


WRITE_OUTPUT = py(
    "import os, pathlib; "
    f"d = pathlib.Path(os.environ[{OUTPUT_DIR_VAR!r}]); "
    "d.mkdir(parents=True, exist_ok=True); "
    "(d / 'index.html').write_text('<h1>hi</h1>'); "
    "(d / 'assets').mkdir(exist_ok=True); "
    "(d / 'assets' / 'app.js').write_text('x=1')"
)


class TestReleaseCommands:
    """Release commands run in order and stop at the first failure."""

    def test_runs_in_order_and_streams(self, tmp_path: Path) -> None:
        console = MockConsole()
        plan = ReleasePlan(release=(py("print('first')"), py("print('second')")))

        result = _executor(tmp_path, console).execute(plan)

        assert isinstance(result, Ok)
        assert result.value.executed == plan.release
        assert result.value.artifact is None
        assert console.streamed("release[1]") == ["first"]
        assert console.streamed("release[2]") == ["second"]

    def test_fail_fast(self, tmp_path: Path) -> None:
        console = MockConsole()
        never = tmp_path / "never-ran"
        failing = py("import sys; sys.exit(3)")
        plan = ReleasePlan(release=(py("print('ok')"), failing, touch(never)))

        result = _executor(tmp_path, console).execute(plan)

        assert result == Err(CommandExited(phase="release", entry=failing, returncode=3))
        assert not never.exists()

    def test_failure_skips_release_build(self, tmp_path: Path) -> None:
        console = MockConsole()
        built = tmp_path / "built"
        plan = ReleasePlan(
            release=(py("import sys; sys.exit(1)"),),
            release_build=touch(built),
        )

        result = _executor(tmp_path, console, target=_target(tmp_path)).execute(plan)

        assert isinstance(result, Err)
        assert isinstance(result.error, CommandExited)
        assert not built.exists()
        assert not (tmp_path / "store").exists()

    def test_spawn_failure(self, tmp_path: Path) -> None:
        entry = CommandEntry("nonexistent_command_12345")
        result = _executor(tmp_path, MockConsole()).execute(ReleasePlan(release=(entry,)))

        assert isinstance(result, Err)
        assert isinstance(result.error, CommandSpawnFailed)
        assert result.error.phase == "release"
        assert result.error.entry == entry

    def test_commands_see_output_dir(self, tmp_path: Path) -> None:
        console = MockConsole()
        plan = ReleasePlan(release=(py(f"import os; print(os.environ[{OUTPUT_DIR_VAR!r}])"),))

        _executor(tmp_path, console).execute(plan)

        assert console.streamed("release[1]") == [str(tmp_path / "static-artifacts")]

    def test_background_child_does_not_block(self, tmp_path: Path) -> None:
        console = MockConsole()
        spawn_sleeper = py(
            "import subprocess, sys; "
            "p = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)']); "
            "print(p.pid, flush=True); print('done', flush=True)"
        )

        start = time.monotonic()
        result = _executor(tmp_path, console).execute(ReleasePlan(release=(spawn_sleeper,)))
        elapsed = time.monotonic() - start

        lines = console.streamed("release[1]")
        try:
            os.kill(int(lines[0]), signal.SIGTERM)
        except (ProcessLookupError, IndexError, ValueError):
            pass

        assert isinstance(result, Ok)
        assert elapsed < 15
        assert "done" in lines

    def test_empty_plan(self, tmp_path: Path) -> None:
        result = _executor(tmp_path, MockConsole()).execute(ReleasePlan())
        assert isinstance(result, Ok)
        assert result.value.executed == ()


class TestReleaseBuild:
    """The release-build output is packed and stored under the release id."""

    def test_output_is_stored(self, tmp_path: Path) -> None:
        console = MockConsole()
        plan = ReleasePlan(release=(py("print('migrate')"),), release_build=WRITE_OUTPUT)

        result = _executor(tmp_path, console, target=_target(tmp_path)).execute(plan)

        assert isinstance(result, Ok)
        assert result.value.executed == (*plan.release, WRITE_OUTPUT)
        artifact = result.value.artifact
        assert artifact is not None
        assert artifact.files_count == 2
        archive = tmp_path / "store" / "release-rel-42.tgz"
        assert artifact.key == str(archive)
        with tarfile.open(archive, "r:gz") as tar:
            assert sorted(tar.getnames()) == ["assets/app.js", "index.html"]

    def test_stored_output_can_be_retrieved(self, tmp_path: Path) -> None:
        target = _target(tmp_path)
        _executor(tmp_path, MockConsole(), target=target).execute(
            ReleasePlan(release_build=WRITE_OUTPUT)
        )

        dest = tmp_path / "served"
        fetched = target.store.get("rel-42", dest)

        assert isinstance(fetched, Ok)
        assert (dest / "index.html").read_text(encoding="utf-8") == "<h1>hi</h1>"
        assert (dest / "assets" / "app.js").read_text(encoding="utf-8") == "x=1"

    def test_empty_output_is_a_warning(self, tmp_path: Path) -> None:
        console = MockConsole()
        plan = ReleasePlan(release_build=py("print('nothing written')"))

        result = _executor(tmp_path, console, target=_target(tmp_path)).execute(plan)

        assert isinstance(result, Ok)
        assert result.value.artifact is None
        assert console.has_warning()
        assert not (tmp_path / "store" / "release-rel-42.tgz").exists()

    def test_failed_release_build(self, tmp_path: Path) -> None:
        build = py("import sys; sys.exit(9)")
        result = _executor(tmp_path, MockConsole(), target=_target(tmp_path)).execute(
            ReleasePlan(release_build=build)
        )
        assert result == Err(CommandExited(phase="release-build", entry=build, returncode=9))

    def test_release_build_without_target_runs_nothing(self, tmp_path: Path) -> None:
        marker = tmp_path / "ran"
        plan = ReleasePlan(release=(touch(marker),), release_build=WRITE_OUTPUT)

        result = _executor(tmp_path, MockConsole()).execute(plan)

        assert isinstance(result, Err)
        assert isinstance(result.error, ArtifactSaveFailed)
        assert result.error.error.kind == "config"
        assert not marker.exists()

    def test_store_failure_is_reported(self, tmp_path: Path) -> None:
        blocker = tmp_path / "store"
        blocker.write_text("not a directory", encoding="utf-8")

        result = _executor(tmp_path, MockConsole(), target=_target(tmp_path)).execute(
            ReleasePlan(release_build=WRITE_OUTPUT)
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, ArtifactSaveFailed)


class TestPrepareTarget:
    def test_requires_release_id(self, tmp_path: Path) -> None:
        result = prepare_target(Settings(artifacts_url=f"file://{tmp_path}"))
        assert isinstance(result, Err)
        assert "RELEASE_ID" in result.error.message

    def test_requires_url(self) -> None:
        result = prepare_target(Settings(release_id="v1"))
        assert isinstance(result, Err)

    def test_opens_store(self, tmp_path: Path) -> None:
        result = prepare_target(Settings(release_id="v1", artifacts_url=f"file://{tmp_path}"))
        assert isinstance(result, Ok)
        assert result.value.release_id == "v1"
        assert isinstance(result.value.store, FilesystemStore)
