"""Tests for relphase.output.errors module."""

from __future__ import annotations

from relphase.artifacts.errors import StoreError
from relphase.core.errors import ErrorCode
from relphase.core.settings import ConfigError
from relphase.output.console import MockConsole
from relphase.output.errors import (
    declaration_error_exit_code,
    print_config_error,
    print_release_failure,
    print_store_error,
    release_failure_exit_code,
    store_error_exit_code,
)
from relphase.release.errors import (
    ArtifactSaveFailed,
    CommandExited,
    CommandSpawnFailed,
    DeclarationError,
)
from relphase.release.model import CommandEntry

ENTRY = CommandEntry("rake", ("db:migrate",), source="project.toml")


class TestPrinting:
    def test_config_error_with_hint(self) -> None:
        console = MockConsole()
        print_config_error(ConfigError("RELEASE_ID is required", hint="set it"), console)
        assert console.messages == ["error: configuration: RELEASE_ID is required", "hint: set it"]

    def test_command_exited_names_phase_and_command(self) -> None:
        console = MockConsole()
        print_release_failure(CommandExited(phase="release", entry=ENTRY, returncode=2), console)
        assert console.messages == [
            "error: release command exited with status code 2: rake db:migrate (project.toml)"
        ]

    def test_spawn_failure_includes_detail(self) -> None:
        console = MockConsole()
        failure = CommandSpawnFailed(phase="release-build", entry=ENTRY, detail="No such file")
        print_release_failure(failure, console)
        assert "release-build command could not be started" in console.text
        assert "No such file" in console.text

    def test_save_failure_prints_store_error(self) -> None:
        console = MockConsole()
        error = StoreError(kind="permission", operation="put", message="AccessDenied", location="k")
        print_release_failure(ArtifactSaveFailed(error), console)
        assert "put failed: AccessDenied (k)" in console.text
        assert console.find("credentials")

    def test_not_found_hint(self) -> None:
        console = MockConsole()
        print_store_error(StoreError(kind="not_found", operation="get", message="missing"), console)
        assert console.find("RELEASE_ID")


class TestExitCodes:
    def test_store_error_codes(self) -> None:
        def code(kind: str) -> int:
            return store_error_exit_code(StoreError(kind=kind, operation="get", message="x"))  # type: ignore[arg-type]

        assert code("config") == ErrorCode.CONFIG_ERROR
        assert code("io") == ErrorCode.IO_ERROR
        assert code("archive") == ErrorCode.IO_ERROR
        assert code("not_found") == ErrorCode.STORAGE_ERROR
        assert code("network") == ErrorCode.STORAGE_ERROR

    def test_release_failure_codes(self) -> None:
        assert release_failure_exit_code(CommandExited("release", ENTRY, 1)) == ErrorCode.COMMAND_ERROR
        assert (
            release_failure_exit_code(CommandSpawnFailed("release", ENTRY, "x"))
            == ErrorCode.COMMAND_ERROR
        )
        saved = ArtifactSaveFailed(StoreError(kind="network", operation="put", message="x"))
        assert release_failure_exit_code(saved) == ErrorCode.STORAGE_ERROR

    def test_declaration_error_codes(self) -> None:
        assert declaration_error_exit_code(DeclarationError("bad")) == ErrorCode.CONFIG_ERROR
        assert (
            declaration_error_exit_code(DeclarationError("io", unreadable=True))
            == ErrorCode.ENV_ERROR
        )
