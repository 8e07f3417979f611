# src/registry_sync/core/engine/planner.py
"""
Planejamento determinístico da ordem de execução de Steps.

Variação determinística do algoritmo de Kahn: sempre que mais de um
Step está pronto, o menor `id` (ordem lexicográfica) é executado
primeiro. A mesma entrada sempre produz a mesma ordem.
"""

from __future__ import annotations

import bisect
from typing import Dict, Iterable, List, Set

from registry_sync.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um Step declarou em `depends_on` um id que não existe no pipeline."""


class CycleDetectedError(ValueError):
    """O grafo de dependências contém um ciclo; nenhuma ordem válida existe."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida o DAG de Steps e retorna a ordem topológica de execução.

    Args:
        steps (Iterable[Step]): Steps declarativos do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica determinística.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    incoming: Dict[str, int] = {sid: 0 for sid in by_id}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, s in by_id.items():
        for dep in list(getattr(s, "depends_on", []) or []):
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
            if sid not in outgoing[dep]:
                outgoing[dep].add(sid)
                incoming[sid] += 1

    ready: List[str] = sorted(sid for sid, c in incoming.items() if c == 0)
    order: List[str] = []
    while ready:
        sid = ready.pop(0)
        order.append(sid)
        for child in sorted(outgoing[sid]):
            incoming[child] -= 1
            if incoming[child] == 0:
                bisect.insort(ready, child)

    if len(order) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order]
