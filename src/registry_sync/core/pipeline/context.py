# src/registry_sync/core/pipeline/context.py
"""
Contexto de execução compartilhado de uma run de reconciliação.

O RunContext é o único meio permitido de:
    - acessar os snapshots de entrada (documentos locais e colaboradores)
    - trocar artefatos entre Steps
    - registrar eventos estruturados de execução
    - coletar warnings não fatais por Step

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global (nenhum logger de processo é usado)
    - Os snapshots de entrada são lidos, nunca mutados

Invariantes:
    - Artefatos são indexados por chave explícita
    - Eventos sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Steps
    - Não persiste eventos (o chamador decide como renderizá-los)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .collaborators import Collaborators


@dataclass
class RunContext:
    """
    Contexto canônico passado a todos os Steps de uma run.

    Campos de entrada:
        - documents: caminho de arquivo → documento decodificado (snapshot local)
        - collaborators: listagens remotas e oracles (snapshot remoto)
        - config: configuração efetiva já resolvida
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    documents: Dict[str, Any] = field(default_factory=dict)
    collaborators: Collaborators = field(default_factory=Collaborators)
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)

    def events_for(self, step_id: str, level: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            e for e in self.events
            if e["step_id"] == step_id and (level is None or e["level"] == level)
        ]
