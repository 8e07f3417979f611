"""Infraestrutura de pipeline: contexto, contrato de Step, tipos e registro."""

from .collaborators import Collaborators
from .context import RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "Collaborators",
    "DuplicateStepIdError",
    "RunContext",
    "Step",
    "StepKind",
    "StepRegistry",
    "StepResult",
    "StepStatus",
]
