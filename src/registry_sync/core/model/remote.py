# src/registry_sync/core/model/remote.py
"""
Registros do snapshot remoto e das respostas de oracles externos.

Todos os registros são construídos a partir de árvores decodificadas
entregues pelos colaboradores (listagens, oracles). O núcleo nunca faz
a chamada de rede: apenas interpreta a resposta.

Decisões arquiteturais:
    - `Environment` é um enum textual (DEV, PROD, VALIDATED)
    - Ambientes desconhecidos são preservados como texto bruto em
      `Deployment.env_raw` e nunca coincidem com um ambiente alvo
    - Campos de controle do registry (lockStatus, managedFrom, status)
      são preservados mas não participam de comparações de mudança

Limites explícitos:
    - Não decide mudanças
    - Não valida consistência entre registros
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .data_structure import DataStructureId, DataStructureMeta
from ._tolerant import (
    as_bool,
    as_list,
    as_mapping,
    as_opt_int,
    as_str,
    as_str_list,
    as_str_map,
)


class Environment(str, Enum):
    """Ambientes de deployment de data structures no registry."""

    DEV = "DEV"
    PROD = "PROD"
    VALIDATED = "VALIDATED"

    @classmethod
    def parse(cls, value: Any) -> Optional["Environment"]:
        if isinstance(value, Environment):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                return None
        return None


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Deployment:
    version: str
    env: Optional[Environment]
    content_hash: str
    env_raw: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "Deployment":
        m = as_mapping(raw)
        env_raw = as_str(m.get("env"))
        return cls(
            version=as_str(m.get("version")),
            env=Environment.parse(env_raw),
            content_hash=as_str(m.get("contentHash")),
            env_raw=env_raw,
        )


@dataclass(frozen=True)
class ListingEntry:
    """Entrada da listagem remota de data structures com histórico de deployments."""

    hash: str
    vendor: str
    name: str
    format: str
    meta: DataStructureMeta = field(default_factory=DataStructureMeta)
    deployments: List[Deployment] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "ListingEntry":
        m = as_mapping(raw)
        return cls(
            hash=as_str(m.get("hash")),
            vendor=as_str(m.get("vendor")),
            name=as_str(m.get("name")),
            format=as_str(m.get("format")),
            meta=DataStructureMeta.from_dict(m.get("meta")),
            deployments=[Deployment.from_dict(d) for d in as_list(m.get("deployments"))],
        )

    @property
    def identity(self) -> DataStructureId:
        return DataStructureId(self.vendor, self.name, self.format)


# ---------------------------------------------------------------------------
# Respostas de oracles
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MigrationNote:
    migration_type: str = ""
    change_type: str = ""
    path: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "MigrationNote":
        m = as_mapping(raw)
        return cls(
            migration_type=as_str(m.get("migrationType")),
            change_type=as_str(m.get("changeType")),
            path=as_str(m.get("path")),
            message=as_str(m.get("message")),
        )


@dataclass(frozen=True)
class MigrationCheck:
    """Resposta do oracle de migração: classe de mudança + notas."""

    change_type: str
    migrations: List[MigrationNote] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "MigrationCheck":
        m = as_mapping(raw)
        return cls(
            change_type=as_str(m.get("changeType")),
            migrations=[MigrationNote.from_dict(n) for n in as_list(m.get("migrations"))],
        )


@dataclass(frozen=True)
class ValidationAnswer:
    """Resposta do oracle de validação de uma data structure."""

    success: bool = False
    valid: bool = False
    message: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "ValidationAnswer":
        m = as_mapping(raw)
        return cls(
            success=as_bool(m.get("success")),
            valid=as_bool(m.get("valid")),
            message=as_str(m.get("message")),
            errors=as_str_list(m.get("errors")),
            warnings=as_str_list(m.get("warnings")),
            info=as_str_list(m.get("info")),
        )


COMPAT_COMPATIBLE = "compatible"
COMPAT_UNDECIDABLE = "undecidable"
COMPAT_INCOMPATIBLE = "incompatible"


@dataclass(frozen=True)
class CompatSource:
    source: str
    status: str
    properties: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "CompatSource":
        m = as_mapping(raw)
        return cls(
            source=as_str(m.get("source")),
            status=as_str(m.get("status")),
            properties=as_str_map(m.get("properties")),
        )


@dataclass(frozen=True)
class CompatResult:
    status: str = ""
    sources: List[CompatSource] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "CompatResult":
        m = as_mapping(raw)
        return cls(
            status=as_str(m.get("status")),
            sources=[CompatSource.from_dict(s) for s in as_list(m.get("sources"))],
            message=as_str(m.get("message")),
        )


# ---------------------------------------------------------------------------
# Data products
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RemoteEntity:
    source: str = ""
    min_cardinality: Optional[int] = None
    max_cardinality: Optional[int] = None
    schema: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteEntity":
        m = as_mapping(raw)
        schema = m.get("schema")
        return cls(
            source=as_str(m.get("source")),
            min_cardinality=as_opt_int(m.get("minCardinality")),
            max_cardinality=as_opt_int(m.get("maxCardinality")),
            schema=as_mapping(schema) if schema else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "source": self.source,
            "minCardinality": self.min_cardinality,
            "maxCardinality": self.max_cardinality,
        }
        if self.schema:
            out["schema"] = self.schema
        return out


@dataclass(frozen=True)
class RemoteEntities:
    tracked: List[RemoteEntity] = field(default_factory=list)
    enriched: List[RemoteEntity] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteEntities":
        m = as_mapping(raw)
        return cls(
            tracked=[RemoteEntity.from_dict(e) for e in as_list(m.get("tracked"))],
            enriched=[RemoteEntity.from_dict(e) for e in as_list(m.get("enriched"))],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracked": [e.to_dict() for e in self.tracked],
            "enriched": [e.to_dict() for e in self.enriched],
        }


@dataclass(frozen=True)
class RemoteSourceApplication:
    id: str
    name: str = ""
    description: str = ""
    owner: str = ""
    app_ids: List[str] = field(default_factory=list)
    entities: RemoteEntities = field(default_factory=RemoteEntities)
    lock_status: str = ""
    managed_from: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteSourceApplication":
        m = as_mapping(raw)
        return cls(
            id=as_str(m.get("id")),
            name=as_str(m.get("name")),
            description=as_str(m.get("description")),
            owner=as_str(m.get("owner")),
            app_ids=as_str_list(m.get("appIds")),
            entities=RemoteEntities.from_dict(m.get("entities")),
            lock_status=as_str(m.get("lockStatus")),
            managed_from=as_str(m.get("managedFrom")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "owner": self.owner,
            "appIds": list(self.app_ids),
            "entities": self.entities.to_dict(),
        }


@dataclass(frozen=True)
class RemoteDataProduct:
    id: str
    name: str = ""
    status: str = ""
    source_application_ids: List[str] = field(default_factory=list)
    domain: str = ""
    owner: str = ""
    description: str = ""
    event_spec_ids: List[str] = field(default_factory=list)
    lock_status: str = ""
    managed_from: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteDataProduct":
        m = as_mapping(raw)
        return cls(
            id=as_str(m.get("id")),
            name=as_str(m.get("name")),
            status=as_str(m.get("status")),
            source_application_ids=as_str_list(m.get("sourceApplications")),
            domain=as_str(m.get("domain")),
            owner=as_str(m.get("owner")),
            description=as_str(m.get("description")),
            event_spec_ids=[as_str(as_mapping(r).get("id")) for r in as_list(m.get("eventSpecs"))],
            lock_status=as_str(m.get("lockStatus")),
            managed_from=as_str(m.get("managedFrom")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sourceApplications": list(self.source_application_ids),
            "domain": self.domain,
            "owner": self.owner,
            "description": self.description,
        }


@dataclass(frozen=True)
class RemoteEventSpec:
    id: str
    name: str = ""
    description: str = ""
    source_application_ids: List[str] = field(default_factory=list)
    event: Optional[RemoteEntity] = None
    entities: RemoteEntities = field(default_factory=RemoteEntities)
    data_product_id: str = ""
    status: str = ""
    version: int = 0

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteEventSpec":
        m = as_mapping(raw)
        event_raw = m.get("event")
        event = RemoteEntity.from_dict(event_raw) if event_raw else None
        if event is not None and not event.source and not event.schema:
            event = None
        return cls(
            id=as_str(m.get("id")),
            name=as_str(m.get("name")),
            description=as_str(m.get("description")),
            source_application_ids=as_str_list(m.get("sourceApplications")),
            event=event,
            entities=RemoteEntities.from_dict(m.get("entities")),
            data_product_id=as_str(m.get("dataProductId")),
            status=as_str(m.get("status")),
            version=as_opt_int(m.get("version")) or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        event = None
        if self.event is not None:
            event = {"source": self.event.source}
            if self.event.schema:
                event["schema"] = self.event.schema
        return {
            "id": self.id,
            "name": self.name,
            "sourceApplications": list(self.source_application_ids),
            "event": event,
            "entities": self.entities.to_dict(),
            "dataProductId": self.data_product_id,
        }


@dataclass(frozen=True)
class RemoteSnapshot:
    """Snapshot remoto de data products, event specs e source applications."""

    data_products: List[RemoteDataProduct] = field(default_factory=list)
    event_specs: List[RemoteEventSpec] = field(default_factory=list)
    source_applications: List[RemoteSourceApplication] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "RemoteSnapshot":
        m = as_mapping(raw)
        return cls(
            data_products=[RemoteDataProduct.from_dict(d) for d in as_list(m.get("dataProducts"))],
            event_specs=[RemoteEventSpec.from_dict(e) for e in as_list(m.get("eventSpecs"))],
            source_applications=[
                RemoteSourceApplication.from_dict(s) for s in as_list(m.get("sourceApplication"))
            ],
        )
