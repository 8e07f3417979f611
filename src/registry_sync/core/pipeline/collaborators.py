# src/registry_sync/core/pipeline/collaborators.py
"""
Contratos dos colaboradores externos.

O núcleo nunca alcança a rede: toda informação remota chega por estes
colaboradores, entregues explicitamente pelo chamador. Listagens são
snapshots obtidos uma única vez por run; oracles são funções chamadas
sob demanda.

Assinaturas:
    - remote_listing: Sequence[ListingEntry]
    - central_listing: Sequence[str] (URIs iglu do repositório central)
    - fetch_deployments(resource_hash) -> Sequence[Deployment]
    - list_destinations() -> Sequence[str]
    - migration_oracle(destination, source_self, target_payload) -> MigrationCheck
    - validation_oracle(data_structure) -> ValidationAnswer
    - compat_checker(event, entities) -> CompatResult
    - remote_snapshot: RemoteSnapshot (data products, event specs, source apps)

Qualquer exceção levantada por um colaborador é fatal para a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from registry_sync.core.model.data_structure import DataStructure, DataStructureSelf
from registry_sync.core.model.remote import (
    CompatResult,
    Deployment,
    ListingEntry,
    MigrationCheck,
    RemoteSnapshot,
    ValidationAnswer,
)


CompatCheckable = Dict[str, Any]

FetchDeployments = Callable[[str], Sequence[Deployment]]
ListDestinations = Callable[[], Sequence[str]]
MigrationOracle = Callable[[str, DataStructureSelf, Dict[str, Any]], MigrationCheck]
ValidationOracle = Callable[[DataStructure], ValidationAnswer]
CompatChecker = Callable[[CompatCheckable, List[CompatCheckable]], CompatResult]


@dataclass
class Collaborators:
    remote_listing: Sequence[ListingEntry] = field(default_factory=list)
    central_listing: Sequence[str] = field(default_factory=list)
    remote_snapshot: RemoteSnapshot = field(default_factory=RemoteSnapshot)
    fetch_deployments: Optional[FetchDeployments] = None
    list_destinations: Optional[ListDestinations] = None
    migration_oracle: Optional[MigrationOracle] = None
    validation_oracle: Optional[ValidationOracle] = None
    compat_checker: Optional[CompatChecker] = None
