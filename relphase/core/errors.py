"""Error codes for CLI exit status.

Every command exits with one of these values. They are part of the contract
with the build lifecycle and the startup sequence that invoke us, so the
numbers must stay stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: Configuration error (missing env, bad URL, invalid release id)
    - 2: Environment error (unreadable declaration files)
    - 3: Command error (release command failed to spawn or exited non-zero)
    - 4: Storage error (network, permission, missing artifact)
    - 5: I/O error (local archive or filesystem failure)
    """

    OK = 0
    CONFIG_ERROR = 1
    ENV_ERROR = 2
    COMMAND_ERROR = 3
    STORAGE_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
