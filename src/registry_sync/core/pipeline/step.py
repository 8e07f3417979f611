# src/registry_sync/core/pipeline/step.py
"""
Contrato canônico de Step do Registry Sync.

Um Step é uma fase atômica da reconciliação (validar, resolver,
classificar). Steps interagem exclusivamente via RunContext e produzem
um StepResult imutável.

Invariantes:
    - Cada Step possui um `id` único
    - Cada Step declara explicitamente suas dependências
    - O método `run` é chamado no máximo uma vez por execução
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Protocolo mínimo de um Step executável pelo Engine.

    Atributos obrigatórios:
        - id: identificador único e estável do Step
        - kind: classificação semântica (`StepKind`)
        - depends_on: ids dos Steps dos quais depende

    A conformidade é estrutural (duck typing), validada em runtime.
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
