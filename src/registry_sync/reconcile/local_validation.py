# src/registry_sync/reconcile/local_validation.py
"""
Validação estrutural de data structures locais.

Checagens por arquivo:
    - campos obrigatórios (apiVersion, resourceType, meta.schemaType,
      data.self.*, data.$schema)
    - valores permitidos (apiVersion, resourceType, schemaType, format)
    - versão no formato M-R-A

E no conjunto:
    - unicidade de vendor/name entre arquivos

Problemas estruturais são coletados e reportados juntos; nenhum arquivo
interrompe a validação dos demais.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from registry_sync.core.constants import (
    API_VERSION_V1,
    RESOURCE_TYPE_DATA_STRUCTURE,
    SCHEMA_FORMATS,
    SCHEMA_TYPES,
)
from registry_sync.core.errors import (
    SyncErrorPayload,
    data_structure_duplicated,
    data_structure_invalid,
)
from registry_sync.core.exceptions import MalformedVersion, ResourceDecodeError
from registry_sync.core.model.data_structure import DataStructure
from registry_sync.core.semver import parse_version


def _missing(path: str) -> str:
    return f"required field dataStructure.{path} is missing"


def _one_of(value: str, path: str, allowed: Sequence[str]) -> str:
    return f"Invalid value {value} at dataStructure.{path}. Available values are: {', '.join(allowed)}"


def _check_enum(problems: List[str], value: str, path: str, allowed: Sequence[str]) -> None:
    if not value:
        problems.append(_missing(path))
    elif value not in allowed:
        problems.append(_one_of(value, path, allowed))


def data_structure_problems(ds: DataStructure) -> List[str]:
    """Lista os problemas estruturais de uma data structure (vazia se válida)."""
    problems: List[str] = []
    _check_enum(problems, ds.api_version, "apiVersion", (API_VERSION_V1,))
    _check_enum(problems, ds.resource_type, "resourceType", (RESOURCE_TYPE_DATA_STRUCTURE,))
    _check_enum(problems, ds.meta.schema_type, "meta.schemaType", SCHEMA_TYPES)

    try:
        data = ds.parse_data()
    except ResourceDecodeError as e:
        problems.append(str(e))
        return problems

    s = data.self_ref
    for key in ("vendor", "name"):
        if not getattr(s, key):
            problems.append(_missing(f"data.self.{key}"))
    _check_enum(problems, s.format, "data.self.format", SCHEMA_FORMATS)
    if not s.version:
        problems.append(_missing("data.self.version"))
    else:
        try:
            parse_version(s.version)
        except MalformedVersion as e:
            problems.append(f"{e} at dataStructure.data.self.version")
    if not data.schema:
        problems.append(_missing("data.$schema"))

    return problems


def validate_local_data_structures(
    locals_by_file: Mapping[str, DataStructure],
) -> List[SyncErrorPayload]:
    """
    Valida todas as data structures locais.

    Args:
        locals_by_file (Mapping[str, DataStructure]): arquivo → data structure.

    Returns:
        List[SyncErrorPayload]: um DATA_STRUCTURE_INVALID por arquivo com
        problemas e um DATA_STRUCTURE_DUPLICATED por vendor/name repetido,
        em ordem determinística.
    """
    out: List[SyncErrorPayload] = []
    by_key: Dict[str, List[str]] = {}

    for file in sorted(locals_by_file):
        ds = locals_by_file[file]
        problems = data_structure_problems(ds)
        if problems:
            out.append(data_structure_invalid(file=file, problems=problems))
        try:
            key = ds.parse_data().self_ref.identity.key()
        except ResourceDecodeError:
            continue
        by_key.setdefault(key, []).append(file)

    for key in sorted(by_key):
        if len(by_key[key]) > 1:
            out.append(data_structure_duplicated(key=key, files=by_key[key]))

    return out
