"""Step canônico: ds.classify (v1).

Responsabilidades:
- Classificar as data structures locais (artifact `ds.locals`) contra a
  listagem remota, para o ambiente alvo da configuração.
- Publicar o change set em `ds.changes`.

Guardrails:
- Em PROD, patches não são permitidos: ProdPatchNotAllowed aborta o Step
  (decision_required=True) e o Engine registra PROD_PATCH_NOT_ALLOWED.

Payload:
payload:
  target_env: DEV | PROD
  counts: {to_create, to_update_meta, to_update_new_version, to_update_patch}
  actions: list[dict]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from registry_sync.core.config.settings import Settings
from registry_sync.core.model.remote import Environment
from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus
from registry_sync.reconcile.changes import classify_changes, ensure_prod_promotable


@dataclass
class DsClassifyStep(Step):
    """Change set de data structures para o ambiente alvo."""

    id: str = "ds.classify"
    kind: StepKind = StepKind.PLAN
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ds.validate_local"]

    def run(self, ctx: RunContext) -> StepResult:
        settings = Settings.from_config(ctx.config)
        locals_by_file = ctx.get_artifact("ds.locals")

        changes = classify_changes(
            locals_by_file,
            ctx.collaborators.remote_listing,
            settings.target_env,
        )
        if settings.target_env == Environment.PROD:
            ensure_prod_promotable(changes)

        ctx.set_artifact("ds.changes", changes)

        counts = changes.counts()
        actions = changes.summary()
        for action in actions:
            ctx.log(step_id=self.id, level="info", message="planned change", **action)

        summary = "no changes detected" if changes.is_empty() else f"{len(actions)} changes planned"
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=summary,
            metrics=dict(counts),
            warnings=[],
            artifacts={"ds.changes": "ds.changes"},
            payload={
                "target_env": settings.target_env.value,
                "counts": counts,
                "actions": actions,
            },
        )
