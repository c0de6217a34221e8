"""Error presentation utilities.

Every failure is printed with the phase and the command or storage
operation that failed, and mapped to a stable exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relphase.artifacts.errors import StoreError
from relphase.core.errors import ErrorCode
from relphase.core.settings import ConfigError
from relphase.output.console import Style
from relphase.release.errors import (
    ArtifactSaveFailed,
    CommandExited,
    CommandSpawnFailed,
    DeclarationError,
    ReleaseFailure,
)

if TYPE_CHECKING:
    from relphase.output.console import ConsoleProtocol

__all__ = [
    "print_config_error",
    "print_release_failure",
    "print_store_error",
    "release_failure_exit_code",
    "store_error_exit_code",
    "declaration_error_exit_code",
]


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(f"configuration: {error.message}")
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def print_store_error(error: StoreError, console: ConsoleProtocol) -> None:
    console.error(f"storage: {error.pretty()}")
    match error.kind:
        case "not_found":
            console.print("hint: check RELEASE_ID and STATIC_ARTIFACTS_URL", Style.DIM)
        case "permission":
            console.print("hint: check the storage credentials and permissions", Style.DIM)
        case _:
            pass


def print_release_failure(error: ReleaseFailure, console: ConsoleProtocol) -> None:
    match error:
        case CommandSpawnFailed(phase=phase, entry=entry, detail=detail):
            console.error(f"{phase} command could not be started: {entry.display()}")
            console.print(detail, Style.DIM)
        case CommandExited(phase=phase, entry=entry, returncode=rc):
            console.error(f"{phase} command exited with status code {rc}: {entry.display()}")
        case ArtifactSaveFailed(error=store_error):
            console.error("release-build output could not be saved")
            print_store_error(store_error, console)


def store_error_exit_code(error: StoreError) -> int:
    match error.kind:
        case "config":
            return int(ErrorCode.CONFIG_ERROR)
        case "io" | "archive":
            return int(ErrorCode.IO_ERROR)
        case _:
            return int(ErrorCode.STORAGE_ERROR)


def release_failure_exit_code(error: ReleaseFailure) -> int:
    match error:
        case CommandSpawnFailed() | CommandExited():
            return int(ErrorCode.COMMAND_ERROR)
        case ArtifactSaveFailed(error=store_error):
            return store_error_exit_code(store_error)
    # Fallback for exhaustiveness
    return int(ErrorCode.COMMAND_ERROR)


def declaration_error_exit_code(error: DeclarationError) -> int:
    if error.unreadable:
        return int(ErrorCode.ENV_ERROR)
    return int(ErrorCode.CONFIG_ERROR)
