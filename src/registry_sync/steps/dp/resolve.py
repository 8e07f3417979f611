"""Step canônico: dp.resolve (v1).

Responsabilidades:
- Classificar os documentos de data products e source applications.
- Validar forma, source applications (incluindo publicação dos schemas
  referenciados) e compatibilidade das event specifications.
- Resolver `$ref` e publicar o grafo em `dp.graph`.
- Listar as imagens de triggers referenciadas (`images` no payload).

Com `sync.validate_all: false`, a checagem de compatibilidade roda apenas
nos arquivos cujo conteúdo difere do snapshot remoto; esses arquivos são
descobertos numa resolução preliminar, sem oracles.

Diagnósticos são emitidos como eventos por arquivo; qualquer erro torna o
Step FAILED.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Set

from registry_sync.core.config.settings import Settings
from registry_sync.core.constants import RESOURCE_TYPE_DATA_STRUCTURE
from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus
from registry_sync.reconcile.data_products import find_dp_changes
from registry_sync.reconcile.deploy_checker import SchemaDeployChecker
from registry_sync.reconcile.references import ReferenceGraph, resolve_references


def select_dp_documents(documents: Mapping[str, Any]) -> Dict[str, Mapping[str, Any]]:
    return {
        file: doc
        for file, doc in documents.items()
        if isinstance(doc, Mapping) and doc.get("resourceType") != RESOURCE_TYPE_DATA_STRUCTURE
    }


def _changed_files(documents: Mapping[str, Mapping[str, Any]], ctx: RunContext) -> Set[str]:
    preliminary = resolve_references(documents, validate_all=False)
    changes = find_dp_changes(preliminary, ctx.collaborators.remote_snapshot)
    return {f for f in changes.id_to_file.values() if f in documents}


def _log_validations(ctx: RunContext, step_id: str, graph: ReferenceGraph) -> None:
    for file in sorted(graph.validations):
        v = graph.validations[file]
        for m in v.debug:
            ctx.log(step_id=step_id, level="debug", message="validating", file=file, msg=m)
        for m in v.info:
            ctx.log(step_id=step_id, level="info", message="validating", file=file, msg=m)
        for m in v.warnings:
            ctx.log(step_id=step_id, level="warning", message="validating", file=file, msg=m)
        for path, msgs in sorted(v.warnings_with_paths.items()):
            ctx.log(step_id=step_id, level="warning", message="validating", file=file, path=path, warnings=msgs)
        for m in v.errors:
            ctx.log(step_id=step_id, level="error", message="validating", file=file, msg=m)
        for path, msgs in sorted(v.errors_with_paths.items()):
            ctx.log(step_id=step_id, level="error", message="validating", file=file, path=path, errors=msgs)


@dataclass
class DpResolveStep(Step):
    """Validação e resolução de referências de data products."""

    id: str = "dp.resolve"
    kind: StepKind = StepKind.RESOLVE
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

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

        documents = select_dp_documents(ctx.documents)
        collaborators = ctx.collaborators

        changed = set() if settings.validate_all else _changed_files(documents, ctx)

        checker = SchemaDeployChecker(
            central_listing=collaborators.central_listing,
            listing=collaborators.remote_listing,
            fetch_deployments=collaborators.fetch_deployments,
            builtin_schemas=settings.builtin_schemas,
        )
        graph = resolve_references(
            documents,
            compat_checker=collaborators.compat_checker,
            deploy_checker=checker,
            changed_files=changed,
            validate_all=settings.validate_all,
            concurrency=settings.concurrency,
            alternatives_limit=settings.alternatives_limit,
        )
        ctx.set_artifact("dp.graph", graph)
        _log_validations(ctx, self.id, graph)

        errors = graph.error_count()
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.FAILED if errors else StepStatus.SUCCESS,
            summary=f"{errors} validation errors" if errors else "data products valid",
            metrics={
                "data_products": len(graph.data_products),
                "source_apps": len(graph.source_apps),
                "errors": errors,
                "deployment_fetches": checker.fetch_count,
            },
            warnings=[],
            artifacts={"dp.graph": "dp.graph"},
            payload={
                "validations": {f: v.to_dict() for f, v in sorted(graph.validations.items())},
                "problems": [p.to_dict() for p in graph.problems],
                "images": graph.image_files(),
            },
        )
