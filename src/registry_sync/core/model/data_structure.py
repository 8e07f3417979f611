# src/registry_sync/core/model/data_structure.py
"""
Data structure local (schema versionado).

Um documento de data structure possui:
    - apiVersion / resourceType
    - meta → bloco mutável e não versionado (visibilidade, tipo, anotações)
    - data → payload versionado, com bloco `self` de identidade e `$schema`

Decisões arquiteturais:
    - `data` é mantido como árvore crua: campos não-identitários precisam
      fazer round-trip sem perda e participam do hash de conteúdo
    - A visão tipada (`DataStructureData`) é derivada sob demanda
    - `customData` ausente e vazio são equivalentes

Invariantes:
    - `DataStructure.data` nunca é mutado por este módulo
    - Identidade de schema é (vendor, name, format); versão não faz parte

Limites explícitos:
    - Não valida valores permitidos (ver reconcile.local_validation)
    - Não calcula diferenças
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, NamedTuple

from registry_sync.core.exceptions import ResourceDecodeError
from registry_sync.core.identity import compute_content_hash

from ._tolerant import as_bool, as_mapping, as_str, as_str_map


class DataStructureId(NamedTuple):
    """Identidade de schema compartilhada entre snapshot local e remoto."""

    vendor: str
    name: str
    format: str

    def key(self) -> str:
        return f"{self.vendor}/{self.name}"


@dataclass(frozen=True)
class DataStructureSelf:
    vendor: str
    name: str
    format: str
    version: str

    @property
    def identity(self) -> DataStructureId:
        return DataStructureId(self.vendor, self.name, self.format)

    def with_version(self, version: str) -> "DataStructureSelf":
        return DataStructureSelf(self.vendor, self.name, self.format, version)

    def to_dict(self) -> Dict[str, str]:
        return {
            "vendor": self.vendor,
            "name": self.name,
            "format": self.format,
            "version": self.version,
        }


@dataclass(frozen=True)
class DataStructureData:
    """Visão tipada de `data`: identidade, `$schema` e o restante intacto."""

    self_ref: DataStructureSelf
    schema: str
    other: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DataStructureMeta:
    hidden: bool = False
    schema_type: str = ""
    custom_data: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "DataStructureMeta":
        m = as_mapping(raw)
        return cls(
            hidden=as_bool(m.get("hidden")),
            schema_type=as_str(m.get("schemaType")),
            custom_data=as_str_map(m.get("customData")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hidden": self.hidden,
            "schemaType": self.schema_type,
            "customData": dict(self.custom_data),
        }


@dataclass(frozen=True)
class DataStructure:
    api_version: str
    resource_type: str
    meta: DataStructureMeta
    data: Dict[str, Any]

    @classmethod
    def from_dict(cls, raw: Any) -> "DataStructure":
        doc = as_mapping(raw)
        return cls(
            api_version=as_str(doc.get("apiVersion")),
            resource_type=as_str(doc.get("resourceType")),
            meta=DataStructureMeta.from_dict(doc.get("meta")),
            data=as_mapping(doc.get("data")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "resourceType": self.resource_type,
            "meta": self.meta.to_dict(),
            "data": self.data,
        }

    def content_hash(self) -> str:
        return compute_content_hash(self.data)

    def parse_data(self) -> DataStructureData:
        """
        Deriva a visão tipada de `data`.

        Raises:
            ResourceDecodeError: Se `self` estiver ausente, não for um mapeamento
                ou tiver campos de identidade não textuais.
        """
        raw_self = self.data.get("self")
        if not isinstance(raw_self, Mapping):
            raise ResourceDecodeError(
                message="data.self is missing or is not a mapping",
                details={"self": repr(raw_self)},
                hint="Declare data.self with vendor, name, format and version",
            )

        values = {}
        for key in ("vendor", "name", "format", "version"):
            v = raw_self.get(key, "")
            if not isinstance(v, str):
                raise ResourceDecodeError(
                    message=f"data.self.{key} must be a string",
                    details={"field": f"data.self.{key}", "value": repr(v)},
                )
            values[key] = v

        schema = self.data.get("$schema", "")
        other = {k: v for k, v in self.data.items() if k not in ("self", "$schema")}
        return DataStructureData(
            self_ref=DataStructureSelf(**values),
            schema=schema if isinstance(schema, str) else "",
            other=other,
        )
