"""Platform layer: processes and files."""

from .files import atomic_write_text, dir_has_files
from .process import LineSink, ProcessError, raise_on_sigterm, stream_run

__all__ = [
    # files
    "atomic_write_text",
    "dir_has_files",
    # process
    "LineSink",
    "ProcessError",
    "raise_on_sigterm",
    "stream_run",
]
