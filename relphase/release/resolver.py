"""Command plan resolution.

Precedence between the inherited (Build Plan) and local (project)
declarations:

- release commands: inherited first, then local, each in declared order.
  Nothing is reordered or de-duplicated.
- release-build: a local declaration wins outright. Otherwise the last
  inherited declaration wins, so later contributors override earlier ones.
"""

from __future__ import annotations

from relphase.release.model import CommandDeclarations, ReleasePlan

__all__ = ["resolve_plan"]


def resolve_plan(inherited: CommandDeclarations, local: CommandDeclarations) -> ReleasePlan:
    """Merge two declaration sources into one plan. Pure; never fails."""
    if local.release_build:
        release_build = local.release_build[-1]
    elif inherited.release_build:
        release_build = inherited.release_build[-1]
    else:
        release_build = None

    return ReleasePlan(
        release=(*inherited.release, *local.release),
        release_build=release_build,
    )
