"""Release phase orchestration: command plans, execution and static artifacts."""

__version__ = "0.1.0"
