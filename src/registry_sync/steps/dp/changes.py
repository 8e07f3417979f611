"""Step canônico: dp.changes (v1).

Responsabilidades:
- Comparar o grafo resolvido (`dp.graph`) com o snapshot remoto.
- Publicar o change set em `dp.changes` e o plano de purge em `dp.purge`.

Nada é aplicado: ambos são planos para o chamador.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus
from registry_sync.reconcile.data_products import find_dp_changes, plan_purge


@dataclass
class DpChangesStep(Step):
    """Change set e plano de purge de data products."""

    id: str = "dp.changes"
    kind: StepKind = StepKind.PLAN
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["dp.resolve"]

    def run(self, ctx: RunContext) -> StepResult:
        graph = ctx.get_artifact("dp.graph")
        snapshot = ctx.collaborators.remote_snapshot

        changes = find_dp_changes(graph, snapshot)
        purge = plan_purge(graph, snapshot)
        ctx.set_artifact("dp.changes", changes)
        ctx.set_artifact("dp.purge", purge)

        actions = changes.summary()
        if not actions:
            ctx.log(step_id=self.id, level="info", message="no changes detected, nothing to apply")
        for action in actions:
            ctx.log(step_id=self.id, level="info", message="planned change", **action)
        ctx.log(
            step_id=self.id,
            level="info",
            message="purge candidates",
            summary=purge.summary(),
            source_apps=[r.name for r in purge.source_apps],
            data_products=[r.name for r in purge.data_products],
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="no changes detected" if changes.is_empty() else f"{len(actions)} changes planned",
            metrics=changes.counts(),
            warnings=[],
            artifacts={"dp.changes": "dp.changes", "dp.purge": "dp.purge"},
            payload={
                "actions": actions,
                "purge": {
                    "source_apps": [r.id for r in purge.source_apps],
                    "data_products": [r.id for r in purge.data_products],
                },
            },
        )
