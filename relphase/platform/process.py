"""Subprocess execution with live output streaming.

``stream_run`` spawns one command, drains its stdout and stderr on two
reader threads while it runs, and forwards each line to a sink as soon as
it is read. The child is always reaped: if the wait is interrupted
(Ctrl-C, SIGTERM turned into KeyboardInterrupt by ``raise_on_sigterm``),
the child is terminated, then killed, before the exception propagates.

Usage:
    result = stream_run(["npm", "run", "build"], cwd=app_dir, env=env, sink=sink)
    match result:
        case Ok(_):
            ...
        case Err(error):
            print(error)
"""

from __future__ import annotations

import signal
import subprocess
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import IO

from relphase.core.result import Err, Ok, Result

__all__ = ["LineSink", "ProcessError", "raise_on_sigterm", "stream_run"]

# (line, is_stderr) -> None
type LineSink = Callable[[str, bool], None]

TERMINATE_GRACE_SECONDS = 5.0

# How long to keep draining pipes after the command exits. A background
# process it started may hold them open indefinitely.
DRAIN_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a command that could not run or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit code, negative signal number, or -1 if never spawned.
        spawned: False when the process could not be started at all.
        detail: OS error text for spawn failures, empty otherwise.
    """

    command: tuple[str, ...]
    returncode: int
    spawned: bool = True
    detail: str = ""

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        if not self.spawned:
            return f"{cmd_str} could not be started ({self.detail})"
        return f"{cmd_str} failed (exit {self.returncode})"


def _pump(pipe: IO[bytes], sink: LineSink, is_stderr: bool, detached: threading.Event) -> None:
    with pipe:
        for raw in iter(pipe.readline, b""):
            if detached.is_set():
                continue
            sink(raw.decode("utf-8", errors="replace").rstrip("\r\n"), is_stderr)


def _terminate(proc: subprocess.Popen[bytes]) -> None:
    if proc.poll() is not None:
        return
    try:
        proc.terminate()
    except OSError:
        return
    try:
        proc.wait(timeout=TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        try:
            proc.kill()
        except OSError:
            return
        proc.wait()


def stream_run(
    cmd: list[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None,
    sink: LineSink,
) -> Result[None, ProcessError]:
    """Run a command to completion, streaming its output to ``sink``.

    Args:
        cmd: Program and arguments.
        cwd: Working directory.
        env: Full environment for the child (None inherits ours).
        sink: Called once per output line, possibly from two threads at once.

    Returns:
        Ok(None) if the command exited 0, Err(ProcessError) otherwise.
    """
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, spawned=False, detail=str(e)))

    assert proc.stdout is not None and proc.stderr is not None
    detached = threading.Event()
    readers = [
        threading.Thread(target=_pump, args=(proc.stdout, sink, False, detached), daemon=True),
        threading.Thread(target=_pump, args=(proc.stderr, sink, True, detached), daemon=True),
    ]
    for reader in readers:
        reader.start()

    try:
        returncode = proc.wait()
    except BaseException:
        _terminate(proc)
        for reader in readers:
            reader.join(timeout=TERMINATE_GRACE_SECONDS)
        raise

    deadline = time.monotonic() + DRAIN_TIMEOUT_SECONDS
    for reader in readers:
        reader.join(timeout=max(deadline - time.monotonic(), 0.0))
    # Readers still blocked belong to pipes inherited by a background process;
    # leave them behind and drop whatever they read from now on.
    detached.set()

    if returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=returncode))
    return Ok(None)


def _sigterm_handler(signum: int, frame: FrameType | None) -> None:
    raise KeyboardInterrupt(f"received signal {signum}")


def raise_on_sigterm() -> None:
    """Turn SIGTERM into KeyboardInterrupt so a running child gets stopped.

    Only valid from the main thread.
    """
    signal.signal(signal.SIGTERM, _sigterm_handler)
