from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from relphase.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    console: ConsoleProtocol
    environ: dict[str, str] = field(default_factory=dict[str, str])


def build_context() -> CLIContext:
    return CLIContext(
        cwd=Path.cwd(),
        console=RichConsole(),
        environ=dict(os.environ),
    )
