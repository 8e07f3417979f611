"""Step canônico: ds.validate_local (v1).

Responsabilidades:
- Selecionar, entre os documentos da run, as data structures
  (`resourceType: data-structure`).
- Decodificar cada uma em DataStructure e publicar o mapa arquivo → recurso
  no artifact `ds.locals`.
- Validar estrutura e unicidade de vendor/name.

Problemas estruturais são coletados e reportados juntos; qualquer problema
torna o Step FAILED (os Steps dependentes são pulados pelo Engine).

Payload:
payload:
  files: int
  problems: list[SyncErrorPayload]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from registry_sync.core.constants import RESOURCE_TYPE_DATA_STRUCTURE
from registry_sync.core.model.data_structure import DataStructure
from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus
from registry_sync.reconcile.local_validation import validate_local_data_structures


def select_data_structures(documents: Mapping[str, Any]) -> Dict[str, DataStructure]:
    return {
        file: DataStructure.from_dict(doc)
        for file, doc in documents.items()
        if isinstance(doc, Mapping) and doc.get("resourceType") == RESOURCE_TYPE_DATA_STRUCTURE
    }


@dataclass
class DsValidateLocalStep(Step):
    """Validação estrutural das data structures locais."""

    id: str = "ds.validate_local"
    kind: StepKind = StepKind.VALIDATE
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        locals_by_file = select_data_structures(ctx.documents)
        ctx.set_artifact("ds.locals", locals_by_file)

        problems = validate_local_data_structures(locals_by_file)
        for p in problems:
            ctx.log(
                step_id=self.id,
                level="error",
                message=p.message,
                error_type=p.type,
                file=p.details.get("file"),
                problems=p.details.get("problems"),
            )

        status = StepStatus.FAILED if problems else StepStatus.SUCCESS
        summary = (
            f"{len(problems)} data structure problems"
            if problems
            else f"{len(locals_by_file)} data structures valid"
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=status,
            summary=summary,
            metrics={"files": len(locals_by_file), "problems": len(problems)},
            warnings=[],
            artifacts={"ds.locals": "ds.locals"},
            payload={
                "files": len(locals_by_file),
                "problems": [p.to_dict() for p in problems],
            },
        )
