"""Planner (DAG determinístico) e executor de Steps."""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution

__all__ = [
    "CycleDetectedError",
    "Engine",
    "RunResult",
    "UnknownDependencyError",
    "plan_execution",
]
