# src/registry_sync/reconcile/data_products.py
"""
Change set de data products, event specifications e source applications.

Converte o grafo de referências resolvido para a forma remota e compara
com o snapshot remoto, por id (resourceName):

    - source application sem remoto → sa_create; diferente → sa_update
    - data product sem remoto → dp_create; diferente → dp_update
    - event spec sem remoto → es_create; diferente → es_update
    - event spec remota de um data product local que não existe mais
      localmente → es_delete

Decisões arquiteturais:
    - Comparação por JSON canônico (mesma serialização do hash de
      conteúdo), nunca por diff textual
    - Listas de ids de source applications são ordenadas antes de comparar
    - Campos de governança remota (lockStatus, managedFrom, status) não
      participam da comparação
    - Source applications de uma event spec = as do data product menos as
      excluídas pela event spec

Limites explícitos:
    - Não aplica nada; o change set é um plano
    - Exige referências já resolvidas (ReferenceGraph)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from registry_sync.core.identity import canonical_json
from registry_sync.core.model.data_product import EntitiesDef, EventSpec, SchemaRef
from registry_sync.core.model.remote import (
    RemoteDataProduct,
    RemoteEntities,
    RemoteEntity,
    RemoteEventSpec,
    RemoteSnapshot,
    RemoteSourceApplication,
)

from .references import ReferenceGraph


def set_minus(items: Iterable[str], remove: Iterable[str]) -> List[str]:
    """Elementos de `items` ausentes em `remove`, ordenados e sem repetição."""
    drop = set(remove)
    return sorted({i for i in items if i not in drop})


def _entity(ref: SchemaRef) -> RemoteEntity:
    return RemoteEntity(
        source=ref.source,
        min_cardinality=ref.min_cardinality,
        max_cardinality=ref.max_cardinality,
        schema=ref.schema or None,
    )


def _entities(defs: Optional[EntitiesDef]) -> RemoteEntities:
    if defs is None:
        return RemoteEntities()
    return RemoteEntities(
        tracked=[_entity(e) for e in defs.tracked],
        enriched=[_entity(e) for e in defs.enriched],
    )


def local_source_app_to_remote(graph: ReferenceGraph, file: str) -> RemoteSourceApplication:
    sa = graph.source_apps[file]
    return RemoteSourceApplication(
        id=sa.resource_name,
        name=sa.data.name,
        description=sa.data.description,
        owner=sa.data.owner,
        app_ids=list(sa.data.app_ids),
        entities=_entities(sa.data.entities),
    )


def local_data_product_to_remote(graph: ReferenceGraph, file: str) -> RemoteDataProduct:
    dp = graph.data_products[file].product
    return RemoteDataProduct(
        id=dp.resource_name,
        name=dp.data.name,
        source_application_ids=graph.source_app_ids(file),
        domain=dp.data.domain,
        owner=dp.data.owner,
        description=dp.data.description,
        event_spec_ids=[es.resource_name for es in dp.data.event_specifications],
    )


def local_event_spec_to_remote(graph: ReferenceGraph, file: str, spec: EventSpec) -> RemoteEventSpec:
    dp = graph.data_products[file].product
    event = _entity(spec.event) if spec.event is not None else None
    return RemoteEventSpec(
        id=spec.resource_name,
        name=spec.name,
        description=spec.description,
        source_application_ids=set_minus(
            graph.source_app_ids(file),
            graph.excluded_ids(file, spec.resource_name),
        ),
        event=event,
        entities=_entities(spec.entities),
        data_product_id=dp.resource_name,
    )


def _sorted_ids(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    out["sourceApplications"] = sorted(out.get("sourceApplications") or [])
    return out


def _differs(local: Any, remote: Any) -> bool:
    return canonical_json(_sorted_ids(local.to_dict())) != canonical_json(_sorted_ids(remote.to_dict()))


def _same_source_app(local: RemoteSourceApplication, remote: RemoteSourceApplication) -> bool:
    return canonical_json(local.to_dict()) == canonical_json(remote.to_dict())


@dataclass
class DataProductChangeSet:
    sa_create: List[RemoteSourceApplication] = field(default_factory=list)
    sa_update: List[RemoteSourceApplication] = field(default_factory=list)
    dp_create: List[RemoteDataProduct] = field(default_factory=list)
    dp_update: List[RemoteDataProduct] = field(default_factory=list)
    es_create: List[RemoteEventSpec] = field(default_factory=list)
    es_update: List[RemoteEventSpec] = field(default_factory=list)
    es_delete: List[RemoteEventSpec] = field(default_factory=list)
    id_to_file: Dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (
            self.sa_create
            or self.sa_update
            or self.dp_create
            or self.dp_update
            or self.es_create
            or self.es_update
            or self.es_delete
        )

    def counts(self) -> Dict[str, int]:
        return {
            "data_products": len(self.dp_create) + len(self.dp_update),
            "event_specs": len(self.es_create) + len(self.es_update) + len(self.es_delete),
            "source_apps": len(self.sa_create) + len(self.sa_update),
        }

    def summary(self) -> List[Dict[str, Any]]:
        """Registros estruturados de cada ação planejada."""
        out: List[Dict[str, Any]] = []

        def add(operation: str, kind: str, items) -> None:
            for item in items:
                out.append(
                    {
                        "operation": operation,
                        "kind": kind,
                        "id": item.id,
                        "name": item.name,
                        "file": self.id_to_file.get(item.id, ""),
                    }
                )

        add("create", "source_application", self.sa_create)
        add("update", "source_application", self.sa_update)
        add("create", "data_product", self.dp_create)
        add("update", "data_product", self.dp_update)
        add("create", "event_specification", self.es_create)
        add("update", "event_specification", self.es_update)
        add("delete", "event_specification", self.es_delete)
        return out


def find_dp_changes(graph: ReferenceGraph, snapshot: RemoteSnapshot) -> DataProductChangeSet:
    """
    Compara o grafo local resolvido com o snapshot remoto.

    Args:
        graph (ReferenceGraph): data products e source applications locais resolvidos.
        snapshot (RemoteSnapshot): data products, event specs e source apps remotos.

    Returns:
        DataProductChangeSet: operações planejadas, em ordem de arquivo, e o
        mapa id → arquivo das entidades afetadas (para event specs removidas,
        o nome do data product remoto).
    """
    remote_sas = {r.id: r for r in snapshot.source_applications}
    remote_dps = {r.id: r for r in snapshot.data_products}
    remote_ess = {r.id: r for r in snapshot.event_specs}
    cs = DataProductChangeSet()

    for file in sorted(graph.source_apps):
        local = local_source_app_to_remote(graph, file)
        remote = remote_sas.get(local.id)
        if remote is None:
            cs.sa_create.append(local)
        elif not _same_source_app(local, remote):
            cs.sa_update.append(local)
        else:
            continue
        cs.id_to_file[local.id] = file

    local_es_ids: Set[str] = {
        es.resource_name
        for resolved in graph.data_products.values()
        for es in resolved.product.data.event_specifications
    }

    for file in sorted(graph.data_products):
        local = local_data_product_to_remote(graph, file)
        remote = remote_dps.get(local.id)
        if remote is None:
            cs.dp_create.append(local)
            cs.id_to_file[local.id] = file
        elif _differs(local, remote):
            cs.dp_update.append(local)
            cs.id_to_file[local.id] = file

        for spec in graph.data_products[file].product.data.event_specifications:
            local_es = local_event_spec_to_remote(graph, file, spec)
            remote_es = remote_ess.get(local_es.id)
            if remote_es is None:
                cs.es_create.append(local_es)
            elif _differs(local_es, remote_es):
                cs.es_update.append(local_es)
            else:
                continue
            cs.id_to_file[local_es.id] = file

        if remote is None:
            continue
        for es_id in remote.event_spec_ids:
            if es_id in local_es_ids:
                continue
            cs.es_delete.append(remote_ess.get(es_id) or RemoteEventSpec(id=es_id, data_product_id=remote.id))
            cs.id_to_file[es_id] = remote.name

    return cs


@dataclass(frozen=True)
class PurgePlan:
    """Recursos remotos sem contrapartida local."""

    source_apps: List[RemoteSourceApplication] = field(default_factory=list)
    data_products: List[RemoteDataProduct] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.source_apps or self.data_products)

    def summary(self) -> str:
        return f"{len(self.source_apps)} source apps and {len(self.data_products)} data products"


def plan_purge(graph: ReferenceGraph, snapshot: RemoteSnapshot) -> PurgePlan:
    """Lista source apps e data products remotos ausentes do conjunto local, ordenados por nome e id."""
    local_sa_ids = {sa.resource_name for sa in graph.source_apps.values()}
    local_dp_ids = {r.product.resource_name for r in graph.data_products.values()}
    return PurgePlan(
        source_apps=sorted(
            (r for r in snapshot.source_applications if r.id not in local_sa_ids),
            key=lambda r: (r.name, r.id),
        ),
        data_products=sorted(
            (r for r in snapshot.data_products if r.id not in local_dp_ids),
            key=lambda r: (r.name, r.id),
        ),
    )
