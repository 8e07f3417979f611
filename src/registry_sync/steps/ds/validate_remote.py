"""Step canônico: ds.validate_remote (v1).

Responsabilidades:
- Submeter o change set (`ds.changes`) ao oracle de validação.
- Rodar o migration advisor para novas versões e patches, contra todos
  os destinos conhecidos.
- Publicar o resultado em `ds.validation`.

Falhas de oracle ou da listagem de destinos abortam a run. Erros de
validação e reports de migração tornam o Step FAILED.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from registry_sync.core.config.settings import Settings
from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus
from registry_sync.reconcile.migrations import contexts_to_advise, fetch_destinations
from registry_sync.reconcile.remote_validation import validate_changes


@dataclass
class DsValidateRemoteStep(Step):
    """Validação remota e suficiência de versão das mudanças planejadas."""

    id: str = "ds.validate_remote"
    kind: StepKind = StepKind.VALIDATE
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["ds.classify"]

    def run(self, ctx: RunContext) -> StepResult:
        settings = Settings.from_config(ctx.config)
        if settings.concurrency_clamped:
            ctx.add_warning(
                step_id=self.id,
                message=(
                    f"concurrency {settings.requested_concurrency} out of range, "
                    f"using {settings.concurrency}"
                ),
            )

        changes = ctx.get_artifact("ds.changes")
        collaborators = ctx.collaborators

        destinations: List[str] = []
        if contexts_to_advise(changes):
            destinations = fetch_destinations(collaborators.list_destinations)

        results = validate_changes(
            changes,
            collaborators.validation_oracle,
            destinations,
            collaborators.migration_oracle,
            concurrency=settings.concurrency,
        )
        ctx.set_artifact("ds.validation", results)

        for entry in results.iglu:
            ctx.log(
                step_id=self.id,
                level=entry.level,
                message="validation",
                file=entry.file,
                messages=list(entry.messages),
            )
        for m in results.migrations:
            ctx.log(
                step_id=self.id,
                level="error",
                message="validation",
                file=m.file_name,
                destination=m.report.destination_type,
                suggested_version=m.report.suggested_version,
                messages=list(m.report.messages),
            )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS if results.valid else StepStatus.FAILED,
            summary=results.message or "validation passed",
            metrics={
                "destinations": len(destinations),
                "iglu_messages": len(results.iglu),
                "migration_reports": len(results.migrations),
            },
            warnings=[],
            artifacts={"ds.validation": "ds.validation"},
            payload=results.to_dict(),
        )
