"""
Registry Sync — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Registry Sync.
Erros são artefatos de domínio e fazem parte do contrato operacional,
devendo ser:

- explícitos
- serializáveis
- atribuídos a um arquivo de origem quando possível
- acionáveis

Nenhuma correção implícita é aplicada.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SyncErrorPayload:
    """
    Payload canônico de erro do Registry Sync.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica se a publicação está bloqueada aguardando decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Referências entre arquivos
REF_NOT_FOUND = "REF_NOT_FOUND"
EXCLUDED_SOURCE_APP_NOT_IN_PARENT = "EXCLUDED_SOURCE_APP_NOT_IN_PARENT"

# Data structures locais
DATA_STRUCTURE_INVALID = "DATA_STRUCTURE_INVALID"
DATA_STRUCTURE_DUPLICATED = "DATA_STRUCTURE_DUPLICATED"

# Publicação
PROD_PATCH_NOT_ALLOWED = "PROD_PATCH_NOT_ALLOWED"

# Colaboradores externos
EXTERNAL_CALL_FAILED = "EXTERNAL_CALL_FAILED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def ref_not_found(
    *,
    file: str,
    ref: str,
    available: List[str],
    hint: str = "Ajuste o $ref para apontar para um arquivo de source application existente.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=REF_NOT_FOUND,
        message=f"source application $ref not found {ref}, available list {available}",
        details={"file": file, "ref": ref, "available": list(available)},
        hint=hint,
    )


def excluded_source_app_not_in_parent(
    *,
    file: str,
    event_spec: str,
    ref: str,
    parent: List[str],
    hint: str = "Inclua a source application no data product ou remova-a da lista de exclusões.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=EXCLUDED_SOURCE_APP_NOT_IN_PARENT,
        message=(
            "event spec source app not in parent data product list "
            f"(event spec: {event_spec}, source app: {ref}), available list {parent}"
        ),
        details={"file": file, "event_spec": event_spec, "ref": ref, "parent": list(parent)},
        hint=hint,
    )


def data_structure_invalid(
    *,
    file: str,
    problems: List[str],
    hint: str = "Corrija os campos indicados no arquivo da data structure.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=DATA_STRUCTURE_INVALID,
        message=f"validation failed for {file}",
        details={"file": file, "problems": list(problems)},
        hint=hint,
    )


def data_structure_duplicated(
    *,
    key: str,
    files: List[str],
    hint: str = "Mantenha uma única definição por vendor/name.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=DATA_STRUCTURE_DUPLICATED,
        message=(
            "the mapping between data structures and files should be unique. "
            f"Files {sorted(files)} describe the same data structure {key}"
        ),
        details={"key": key, "files": sorted(files)},
        hint=hint,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique os eventos da run para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução do pipeline",
        details={"step": step, "exc_type": exc_type, "exc_message": exc_message},
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração da run e dos steps antes de reexecutar.",
) -> SyncErrorPayload:
    return SyncErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
