# src/registry_sync/core/model/data_product.py
"""Data products, event specifications e source applications locais."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ._tolerant import (
    as_list,
    as_mapping,
    as_opt_int,
    as_str,
    as_str_list,
    as_str_map,
)


def _refs(value: Any) -> List[Dict[str, str]]:
    return [as_str_map(r) for r in as_list(value) if isinstance(r, dict)]


@dataclass(frozen=True)
class SchemaRef:
    """Referência a um schema (`source` é uma URI iglu) com regras opcionais."""

    source: str = ""
    min_cardinality: Optional[int] = None
    max_cardinality: Optional[int] = None
    schema: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "SchemaRef":
        m = as_mapping(raw)
        schema = m.get("schema")
        return cls(
            source=as_str(m.get("source")),
            min_cardinality=as_opt_int(m.get("minCardinality")),
            max_cardinality=as_opt_int(m.get("maxCardinality")),
            schema=as_mapping(schema) if schema is not None else None,
        )

    def is_empty(self) -> bool:
        return (
            not self.source
            and self.min_cardinality is None
            and self.max_cardinality is None
            and not self.schema
        )

    def has_rules(self) -> bool:
        return bool(self.schema)


@dataclass(frozen=True)
class EntitiesDef:
    tracked: List[SchemaRef] = field(default_factory=list)
    enriched: List[SchemaRef] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "EntitiesDef":
        m = as_mapping(raw)
        return cls(
            tracked=[SchemaRef.from_dict(e) for e in as_list(m.get("tracked"))],
            enriched=[SchemaRef.from_dict(e) for e in as_list(m.get("enriched"))],
        )

    def groups(self):
        """Pares (chave, lista) na ordem em que caminhos são reportados."""
        return (("tracked", self.tracked), ("enriched", self.enriched))


@dataclass(frozen=True)
class Trigger:
    id: str = ""
    description: str = ""
    app_ids: List[str] = field(default_factory=list)
    url: str = ""
    image_ref: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Trigger":
        m = as_mapping(raw)
        image = as_mapping(m.get("image")).get("$ref")
        return cls(
            id=as_str(m.get("id")),
            description=as_str(m.get("description")),
            app_ids=as_str_list(m.get("appIds")),
            url=as_str(m.get("url")),
            image_ref=image if isinstance(image, str) and image else None,
        )


@dataclass(frozen=True)
class EventSpec:
    resource_name: str
    name: str = ""
    description: str = ""
    excluded_source_applications: List[Dict[str, str]] = field(default_factory=list)
    triggers: List[Trigger] = field(default_factory=list)
    event: Optional[SchemaRef] = None
    entities: EntitiesDef = field(default_factory=EntitiesDef)

    @classmethod
    def from_dict(cls, raw: Any) -> "EventSpec":
        m = as_mapping(raw)
        event = SchemaRef.from_dict(m.get("event")) if m.get("event") is not None else None
        return cls(
            resource_name=as_str(m.get("resourceName")),
            name=as_str(m.get("name")),
            description=as_str(m.get("description")),
            excluded_source_applications=_refs(m.get("excludedSourceApplications")),
            triggers=[Trigger.from_dict(t) for t in as_list(m.get("triggers"))],
            event=None if event is None or event.is_empty() else event,
            entities=EntitiesDef.from_dict(m.get("entities")),
        )


@dataclass(frozen=True)
class DataProductData:
    name: str = ""
    domain: str = ""
    owner: str = ""
    description: str = ""
    source_applications: List[Dict[str, str]] = field(default_factory=list)
    event_specifications: List[EventSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Any) -> "DataProductData":
        m = as_mapping(raw)
        return cls(
            name=as_str(m.get("name")),
            domain=as_str(m.get("domain")),
            owner=as_str(m.get("owner")),
            description=as_str(m.get("description")),
            source_applications=_refs(m.get("sourceApplications")),
            event_specifications=[EventSpec.from_dict(e) for e in as_list(m.get("eventSpecifications"))],
        )


@dataclass(frozen=True)
class DataProduct:
    api_version: str
    resource_type: str
    resource_name: str
    data: DataProductData

    @classmethod
    def from_dict(cls, raw: Any) -> "DataProduct":
        doc = as_mapping(raw)
        return cls(
            api_version=as_str(doc.get("apiVersion")),
            resource_type=as_str(doc.get("resourceType")),
            resource_name=as_str(doc.get("resourceName")),
            data=DataProductData.from_dict(doc.get("data")),
        )


@dataclass(frozen=True)
class SourceAppData:
    name: str = ""
    description: str = ""
    owner: str = ""
    app_ids: List[str] = field(default_factory=list)
    entities: Optional[EntitiesDef] = None

    @classmethod
    def from_dict(cls, raw: Any) -> "SourceAppData":
        m = as_mapping(raw)
        entities = m.get("entities")
        return cls(
            name=as_str(m.get("name")),
            description=as_str(m.get("description")),
            owner=as_str(m.get("owner")),
            app_ids=as_str_list(m.get("appIds")),
            entities=EntitiesDef.from_dict(entities) if entities is not None else None,
        )


@dataclass(frozen=True)
class SourceApp:
    api_version: str
    resource_type: str
    resource_name: str
    data: SourceAppData

    @classmethod
    def from_dict(cls, raw: Any) -> "SourceApp":
        doc = as_mapping(raw)
        return cls(
            api_version=as_str(doc.get("apiVersion")),
            resource_type=as_str(doc.get("resourceType")),
            resource_name=as_str(doc.get("resourceName")),
            data=SourceAppData.from_dict(doc.get("data")),
        )
