# src/registry_sync/core/pipeline/types.py
"""
Tipos canônicos do pipeline de reconciliação.

Componentes principais:
    - StepStatus → estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → classificação semântica de Steps
    - StepResult → resultado imutável de execução

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável
    - Tipos não dependem de engine nem de colaboradores externos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps.

    Tipos definidos:
        - VALIDATE: validações locais ou remotas (produzem diagnósticos)
        - RESOLVE: resolução de referências entre arquivos
        - PLAN: cálculo de change sets (nada é publicado)

    O tipo é puramente informativo: o Engine não o usa para decidir execução.
    """
    VALIDATE = "validate"
    RESOLVE = "resolve"
    PLAN = "plan"


class StepStatus(str, Enum):
    """
    Estados finais da execução de um Step.

        - SUCCESS: execução concluída
        - SKIPPED: pulado por configuração ou dependência falha
        - FAILED: interrompido por erro ou por diagnósticos bloqueantes
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final
        - summary: resumo textual
        - metrics: contagens produzidas pelo Step
        - warnings: avisos não fatais
        - artifacts: chaves de artefatos publicados no RunContext e metadados
        - payload: dados serializáveis do resultado (change sets, diagnósticos)
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)
