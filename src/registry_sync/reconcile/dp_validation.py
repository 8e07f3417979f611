# src/registry_sync/reconcile/dp_validation.py
"""
Validação local de data products e source applications.

Cobre, por documento:
    - forma (JSON Schema via `jsonschema`), erros agrupados por JSON pointer
    - source applications: uuid, nome, appIds, sources, cardinalidades,
      ausência de regras e publicação dos schemas referenciados
    - data products: compatibilidade das event specifications com as data
      structures de origem (oracle externo, chamadas concorrentes)

Decisões arquiteturais:
    - Cada função devolve um FileValidations; quem agrega é o chamador
    - Chamadas ao oracle de compatibilidade rodam em paralelo (limitadas
      por `concurrency`), mas os resultados são aplicados na ordem das
      event specifications, para saída determinística
    - Falha do oracle aborta a validação (ExternalCallError)

Limites explícitos:
    - Não resolve `$ref` (ver references)
    - Não faz I/O de arquivo
"""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Tuple

from jsonschema import Draft7Validator

from registry_sync.core.diagnostics import FileValidations
from registry_sync.core.model.data_product import DataProduct, SchemaRef, SourceApp
from registry_sync.core.model.remote import (
    COMPAT_INCOMPATIBLE,
    COMPAT_UNDECIDABLE,
    CompatResult,
)
from registry_sync.core.pipeline.collaborators import CompatChecker, CompatCheckable

from .deploy_checker import SchemaDeployChecker, format_alternatives, is_valid_iglu_uri
from .external import call_external


_UUID_PATTERN = "^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"

_REF = {
    "type": "object",
    "required": ["$ref"],
    "properties": {"$ref": {"type": "string", "minLength": 1}},
}

# Regras de propriedade precisam fechar o objeto: sem isso a checagem de
# compatibilidade não tem como decidir.
_RULES = {
    "type": "object",
    "required": ["type", "additionalProperties"],
    "properties": {
        "type": {"const": "object"},
        "additionalProperties": {"const": False},
    },
}

_SCHEMA_REF = {
    "type": "object",
    "required": ["source"],
    "properties": {
        "source": {"type": "string", "pattern": "^iglu:"},
        "minCardinality": {"type": "integer"},
        "maxCardinality": {"type": "integer"},
        "schema": _RULES,
    },
}

_ENTITIES = {
    "type": "object",
    "properties": {
        "tracked": {"type": "array", "items": _SCHEMA_REF},
        "enriched": {"type": "array", "items": _SCHEMA_REF},
    },
}

DATA_PRODUCT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["apiVersion", "resourceType", "resourceName", "data"],
    "properties": {
        "apiVersion": {"const": "v1"},
        "resourceType": {"const": "data-product"},
        "resourceName": {"type": "string", "pattern": _UUID_PATTERN},
        "data": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "domain": {"type": "string"},
                "owner": {"type": "string"},
                "description": {"type": "string"},
                "sourceApplications": {"type": "array", "items": _REF},
                "eventSpecifications": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["resourceName", "name"],
                        "properties": {
                            "resourceName": {"type": "string", "pattern": _UUID_PATTERN},
                            "name": {"type": "string", "minLength": 1},
                            "description": {"type": "string"},
                            "excludedSourceApplications": {"type": "array", "items": _REF},
                            "triggers": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "properties": {
                                        "id": {"type": "string"},
                                        "description": {"type": "string"},
                                        "appIds": {"type": "array", "items": {"type": "string"}},
                                        "url": {"type": "string"},
                                        "image": _REF,
                                    },
                                },
                            },
                            "event": _SCHEMA_REF,
                            "entities": _ENTITIES,
                        },
                    },
                },
            },
        },
    },
}

SOURCE_APPLICATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["apiVersion", "resourceType", "resourceName", "data"],
    "properties": {
        "apiVersion": {"const": "v1"},
        "resourceType": {"const": "source-application"},
        "resourceName": {"type": "string"},
        "data": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string"},
                "description": {"type": "string"},
                "owner": {"type": "string"},
                "appIds": {"type": "array", "items": {"type": "string"}},
                "entities": _ENTITIES,
            },
        },
    },
}

_DP_VALIDATOR = Draft7Validator(DATA_PRODUCT_SCHEMA)
_SA_VALIDATOR = Draft7Validator(SOURCE_APPLICATION_SCHEMA)


def _pointer(path) -> str:
    parts = [str(p) for p in path]
    return "/" + "/".join(parts) if parts else "/"


def _validate_with(validator: Draft7Validator, doc: Mapping[str, Any]) -> Tuple[FileValidations, bool]:
    v = FileValidations()
    for err in sorted(validator.iter_errors(doc), key=lambda e: (_pointer(e.absolute_path), e.message)):
        v.add_path_error(_pointer(err.absolute_path), err.message)
    return v, not v.errors_with_paths


def validate_dp_shape(doc: Mapping[str, Any]) -> Tuple[FileValidations, bool]:
    """Valida a forma de um documento data-product; devolve (validações, ok)."""
    return _validate_with(_DP_VALIDATOR, doc)


def validate_sa_shape(doc: Mapping[str, Any]) -> Tuple[FileValidations, bool]:
    """Valida a forma de um documento source-application; devolve (validações, ok)."""
    return _validate_with(_SA_VALIDATOR, doc)


# ---------------------------------------------------------------------------
# Source applications
# ---------------------------------------------------------------------------

def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def validate_sa_minimum(sa: SourceApp) -> FileValidations:
    v = FileValidations()
    if not _is_uuid(sa.resource_name):
        v.errors.append("resourceName must be a valid uuid")
    if not sa.data.name:
        v.errors.append("data.name required")
    return v


def validate_sa_app_ids(sa: SourceApp) -> FileValidations:
    v = FileValidations()
    for i, app_id in enumerate(sa.data.app_ids):
        if not app_id:
            v.errors.append(f"data.appIds[{i}] can't be empty")
    return v


def validate_sa_entity_sources(sa: SourceApp) -> FileValidations:
    v = FileValidations()
    if sa.data.entities is None:
        return v
    for key, refs in sa.data.entities.groups():
        for i, ref in enumerate(refs):
            if not ref.source:
                v.errors.append(f"data.entities.{key}[{i}].source required")
    return v


def _cardinality_problems(key: str, i: int, ref: SchemaRef) -> List[str]:
    out: List[str] = []
    if ref.min_cardinality is not None:
        if ref.min_cardinality < 0:
            out.append(f"data.entities.{key}[{i}].minCardinality must be > 0")
        if ref.max_cardinality is not None and ref.max_cardinality < ref.min_cardinality:
            out.append(
                f"data.entities.{key}[{i}].maxCardinality must be > minCardinality: {ref.min_cardinality}"
            )
    elif ref.max_cardinality is not None:
        out.append(f"data.entities.{key}[{i}].maxCardinality without minCardinality")
    return out


def validate_sa_cardinalities(sa: SourceApp) -> FileValidations:
    v = FileValidations()
    if sa.data.entities is None:
        return v
    for key, refs in sa.data.entities.groups():
        for i, ref in enumerate(refs):
            v.errors.extend(_cardinality_problems(key, i, ref))
    return v


def validate_sa_entities_have_no_rules(sa: SourceApp) -> FileValidations:
    v = FileValidations()
    if sa.data.entities is None:
        return v
    for key, refs in sa.data.entities.groups():
        for i, ref in enumerate(refs):
            if ref.schema is not None:
                v.errors.append(
                    f"data.entities.{key}[{i}].schema property rules unsupported for source applications"
                )
    return v


def validate_sa_schemas_deployed(
    checker: SchemaDeployChecker,
    sa: SourceApp,
    alternatives_limit: int = 5,
) -> FileValidations:
    """
    Verifica que toda entidade de `sa` referencia um schema publicado.

    Args:
        checker (SchemaDeployChecker): resolvedor de publicação.
        sa (SourceApp): source application já validada em forma.
        alternatives_limit (int): máximo de versões alternativas exibidas.

    Returns:
        FileValidations: um erro por entidade inválida ou não publicada.

    Raises:
        ExternalCallError: Se a busca de histórico de deployments falhar.
    """
    v = FileValidations()
    if sa.data.entities is None:
        return v
    for key, refs in sa.data.entities.groups():
        for i, ref in enumerate(refs):
            prefix = f"data.entities.{key}[{i}].source"
            if not is_valid_iglu_uri(ref.source):
                v.errors.append(
                    f"{prefix} invalid iglu uri should follow the format iglu:vendor/name/format/version, "
                    "eg: iglu:io.snowplow/login/jsonschema/1-0-0"
                )
                continue

            check = checker.is_deployed(ref.source)
            if check.found:
                continue
            if check.alternative_versions:
                available = format_alternatives(check.alternative_versions, alternatives_limit)
                v.errors.append(
                    f"{prefix} could not find deployment of {ref.source}, available versions ({available})"
                )
            else:
                v.errors.append(f"{prefix} could not find deployment of {ref.source}")
    return v


def validate_source_app(
    sa: SourceApp,
    *,
    deploy_checker: Optional[SchemaDeployChecker] = None,
    shape_ok: bool = True,
    alternatives_limit: int = 5,
) -> FileValidations:
    """Aplica todas as checagens locais de source application (forma à parte)."""
    v = FileValidations()
    v.merge(validate_sa_minimum(sa))
    v.merge(validate_sa_app_ids(sa))
    v.merge(validate_sa_entity_sources(sa))
    v.merge(validate_sa_cardinalities(sa))
    v.merge(validate_sa_entities_have_no_rules(sa))
    if shape_ok and deploy_checker is not None:
        v.merge(validate_sa_schemas_deployed(deploy_checker, sa, alternatives_limit))
    return v


# ---------------------------------------------------------------------------
# Compatibilidade de event specifications
# ---------------------------------------------------------------------------

def _compat_request(
    index: int, spec
) -> Tuple[Optional[CompatCheckable], List[CompatCheckable], Dict[str, str], bool]:
    event: Optional[CompatCheckable] = None
    entities: List[CompatCheckable] = []
    paths: Dict[str, str] = {}
    has_entity_rules = False

    if spec.event is not None and spec.event.has_rules():
        paths[spec.event.source] = f"/data/eventSpecifications/{index}/event/schema"
        event = {"source": spec.event.source, "schema": spec.event.schema}

    for key, refs in spec.entities.groups():
        for j, ent in enumerate(refs):
            if not ent.has_rules():
                continue
            has_entity_rules = True
            paths[ent.source] = f"/data/eventSpecifications/{index}/entities/{key}/{j}/schema"
            entities.append({"source": ent.source, "schema": ent.schema})

    return event, entities, paths, has_entity_rules


def _apply_compat(v: FileValidations, result: CompatResult, paths: Mapping[str, str]) -> None:
    for src in result.sources:
        path = paths.get(src.source)
        if path is None:
            continue
        if src.status == COMPAT_INCOMPATIBLE:
            v.add_path_error(path, f"definition incompatible with source data structure ({src.source})")
        elif src.status == COMPAT_UNDECIDABLE:
            v.add_path_warning(
                path, f"definition has unknown compatibility with source data structure ({src.source})"
            )
        for prop, status in sorted(src.properties.items()):
            prop_path = f"{path}/{prop}"
            if status == COMPAT_INCOMPATIBLE:
                v.add_path_error(
                    prop_path,
                    f"definition incompatible with .{prop} in source data structure ({src.source})",
                )
            elif status == COMPAT_UNDECIDABLE:
                v.add_path_warning(
                    prop_path,
                    f"definition has unknown compatibility with .{prop} in source data structure ({src.source})",
                )


def check_event_spec_compat(
    compat_checker: Optional[CompatChecker],
    dp: DataProduct,
    concurrency: int = 1,
) -> FileValidations:
    """
    Checa a compatibilidade das regras de cada event specification com as
    data structures de origem.

    Event specifications sem regras de evento não são checadas; se tiverem
    regras apenas em entidades, geram um aviso.

    Raises:
        ExternalCallError: Se o oracle não estiver configurado ou falhar.
    """
    v = FileValidations()
    jobs: List[Tuple[CompatCheckable, List[CompatCheckable], Dict[str, str]]] = []

    for i, spec in enumerate(dp.data.event_specifications):
        event, entities, paths, has_entity_rules = _compat_request(i, spec)
        if event is None:
            if has_entity_rules:
                v.add_path_warning(
                    f"/data/eventSpecifications/{i}",
                    "will not run compatibility checks on entities without an event defined",
                )
            continue
        jobs.append((event, entities, paths))

    if not jobs:
        return v

    with ThreadPoolExecutor(max_workers=max(1, concurrency)) as pool:
        futures = [
            pool.submit(call_external, "compat_checker", compat_checker, event, entities)
            for event, entities, _ in jobs
        ]
        for (_, _, paths), future in zip(jobs, futures):
            _apply_compat(v, future.result(), paths)

    return v
