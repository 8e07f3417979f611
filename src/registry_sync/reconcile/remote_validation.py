# src/registry_sync/reconcile/remote_validation.py
"""
Validação remota de um change set de data structures.

Duas fontes de falha:
    - oracle de validação: cada data structure a criar, com nova versão ou
      com patch é submetida; erros reportados contam como falha
    - migration advisor: cada MigrationReport conta como falha

Decisões arquiteturais:
    - Chamadas ao oracle de validação são concorrentes (limitadas), mas os
      resultados são registrados na ordem do change set
    - Qualquer falha de colaborador aborta (ExternalCallError); não existe
      resultado parcial

Limites explícitos:
    - Não imprime; `annotations()` devolve linhas para o chamador
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from registry_sync.core.model.remote import ValidationAnswer
from registry_sync.core.pipeline.collaborators import MigrationOracle, ValidationOracle

from .changes import ChangeContext, Changes
from .external import call_external
from .migrations import FileMigrationReport, advise_all, contexts_to_advise


LEVEL_INFO = "info"
LEVEL_WARNING = "warning"
LEVEL_ERROR = "error"

_ANNOTATION = {LEVEL_INFO: "notice", LEVEL_WARNING: "warning", LEVEL_ERROR: "error"}


@dataclass(frozen=True)
class IgluValidation:
    file: str
    messages: List[str]
    level: str


@dataclass
class ValidationResults:
    valid: bool = True
    message: str = ""
    iglu: List[IgluValidation] = field(default_factory=list)
    migrations: List[FileMigrationReport] = field(default_factory=list)

    def annotations(self) -> List[str]:
        lines = [
            f"::{_ANNOTATION[i.level]} file={i.file}::{'%0A'.join(i.messages)}" for i in self.iglu
        ]

        by_file: Dict[str, List[FileMigrationReport]] = {}
        for m in self.migrations:
            by_file.setdefault(m.file_name, []).append(m)
        for file in sorted(by_file):
            body = "".join(
                f"%0ASuggested version {m.report.suggested_version} for {m.report.destination_type}"
                f"%0A{'%0A'.join(m.report.messages)}"
                for m in by_file[file]
            )
            lines.append(f"::error file={file}::{body}")
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "message": self.message,
            "iglu": [{"file": i.file, "level": i.level, "messages": list(i.messages)} for i in self.iglu],
            "migrations": [{"file": m.file_name, **m.report.to_dict()} for m in self.migrations],
        }


def _to_validate(changes: Changes) -> List[ChangeContext]:
    return list(changes.to_create) + list(changes.to_update_new_version) + list(changes.to_update_patch)


def validate_changes(
    changes: Changes,
    validation_oracle: Optional[ValidationOracle],
    destinations: Sequence[str],
    migration_oracle: Optional[MigrationOracle],
    *,
    concurrency: int = 1,
) -> ValidationResults:
    """
    Submete o change set ao oracle de validação e ao migration advisor.

    Args:
        changes (Changes): change set classificado.
        validation_oracle (ValidationOracle): valida uma data structure.
        destinations (Sequence[str]): tipos de destino conhecidos.
        migration_oracle (MigrationOracle): classifica mudanças por destino.
        concurrency (int): chamadas simultâneas ao oracle de validação.

    Returns:
        ValidationResults: mensagens por arquivo, reports de migração e
        veredito (`valid`, `message` com o número de falhas).

    Raises:
        ExternalCallError: Se algum colaborador falhar ou não estiver configurado.
    """
    res = ValidationResults()
    failed = 0

    contexts = _to_validate(changes)
    if contexts:
        with ThreadPoolExecutor(max_workers=max(1, concurrency)) as pool:
            futures = [
                pool.submit(call_external, "validation_oracle", validation_oracle, c.resource)
                for c in contexts
            ]
            answers: List[ValidationAnswer] = [f.result() for f in futures]

        for ctx, answer in zip(contexts, answers):
            if answer.warnings:
                res.iglu.append(IgluValidation(ctx.file_name, list(answer.warnings), LEVEL_WARNING))
            if answer.info:
                res.iglu.append(IgluValidation(ctx.file_name, list(answer.info), LEVEL_INFO))
            if answer.errors:
                res.iglu.append(IgluValidation(ctx.file_name, list(answer.errors), LEVEL_ERROR))
                failed += 1

    to_advise = contexts_to_advise(changes)
    if to_advise:
        res.migrations = advise_all(to_advise, destinations, migration_oracle)
        failed += len(res.migrations)

    if failed:
        res.valid = False
        res.message = f"{failed} validation failures"
    return res
