"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing
directly. Production uses ``RichConsole``; tests use ``MockConsole`` and
assert on what was captured.

Diagnostics go to stderr. Output forwarded from child processes goes to
stdout or stderr, matching the stream it came from, one line at a time and
prefixed with the command label.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()
    STDOUT = auto()  # forwarded child stdout
    STDERR = auto()  # forwarded child stderr

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...

    def stream(self, label: str, line: str, *, stderr: bool = False) -> None:
        """Forward one line of child process output.

        Must be safe to call from several threads at once.
        """
        ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._err = Console(stderr=True)
        self._out = Console()
        self._lock = threading.Lock()
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
            Style.STDOUT: "",
            Style.STDERR: "",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._err.print(message, style=rich_style)
        else:
            self._err.print(message)

    def success(self, message: str) -> None:
        self._err.print(f"[green]OK[/green] {message}")

    def error(self, message: str) -> None:
        self._err.print(f"[red bold]error:[/red bold] {message}")

    def warning(self, message: str) -> None:
        self._err.print(f"[yellow]warning:[/yellow] {message}")

    def info(self, message: str) -> None:
        self._err.print(f"[cyan]info:[/cyan] {message}")

    def header(self, message: str) -> None:
        self._err.print(f"\n[blue bold]{message}[/blue bold]")

    def stream(self, label: str, line: str, *, stderr: bool = False) -> None:
        target = self._err if stderr else self._out
        with self._lock:
            target.print(f"[dim]{label} |[/dim] ", end="")
            # Child output is printed verbatim: no markup, no highlighting.
            target.print(line, markup=False, highlight=False, soft_wrap=True)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style
    label: str | None = None


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _add(self, record: OutputRecord) -> None:
        with self._lock:
            self.outputs.append(record)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._add(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self._add(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self._add(OutputRecord(f"error: {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self._add(OutputRecord(f"warning: {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self._add(OutputRecord(f"info: {message}", Style.INFO))

    def header(self, message: str) -> None:
        self._add(OutputRecord(message, Style.HEADER))

    def stream(self, label: str, line: str, *, stderr: bool = False) -> None:
        self._add(OutputRecord(line, Style.STDERR if stderr else Style.STDOUT, label=label))

    # Test helpers

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def streamed(self, label: str | None = None) -> list[str]:
        """Lines forwarded from child processes, optionally for one label."""
        return [
            o.message
            for o in self.outputs
            if o.style in (Style.STDOUT, Style.STDERR) and (label is None or o.label == label)
        ]

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
