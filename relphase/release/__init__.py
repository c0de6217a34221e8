"""Release commands: declarations, plan resolution and execution."""

from .declarations import load_build_plan, load_project_declarations
from .errors import (
    ArtifactSaveFailed,
    CommandExited,
    CommandSpawnFailed,
    DeclarationError,
    ReleaseFailure,
)
from .executor import ArtifactTarget, ExecutionReport, PhaseExecutor, prepare_target
from .model import CommandDeclarations, CommandEntry, ReleasePlan
from .plan_file import read_plan_file, write_plan_file
from .resolver import resolve_plan

__all__ = [
    # declarations
    "load_build_plan",
    "load_project_declarations",
    # errors
    "ArtifactSaveFailed",
    "CommandExited",
    "CommandSpawnFailed",
    "DeclarationError",
    "ReleaseFailure",
    # executor
    "ArtifactTarget",
    "ExecutionReport",
    "PhaseExecutor",
    "prepare_target",
    # model
    "CommandDeclarations",
    "CommandEntry",
    "ReleasePlan",
    # plan file
    "read_plan_file",
    "write_plan_file",
    # resolver
    "resolve_plan",
]
