# src/registry_sync/reconcile/changes.py
"""
Change Classifier de data structures.

Compara data structures locais (endereçadas por vendor/name/format) com a
listagem remota e produz um change set para um ambiente alvo.

Algoritmo, por recurso local:
    1. Sem entrada remota com a mesma identidade → to_create
    2. Com entrada remota:
        - `meta` local diferente do remoto → to_update_meta
          (ortogonal às demais classificações)
        - deployment do ambiente alvo encontrado e hash diferente:
            - versão local diferente → to_update_new_version (remote_version = versão do deployment)
            - mesma versão → to_update_patch (com ambos os hashes)
        - nenhum deployment no ambiente alvo → to_update_new_version sem remote_version
          (primeiro deploy nesse ambiente, ex.: promoção dev → prod)
        - deployment encontrado com hash igual → nada a fazer

Invariantes:
    - Um recurso aparece em no máximo um bucket de versão
    - A saída é determinística: arquivos são processados em ordem
    - Nenhum input é mutado

Limites explícitos:
    - Não publica nada
    - Não chama oracles (ver migrations / remote_validation)

Este módulo existe para garantir detecção de mudança baseada em
identidade de domínio e hash de conteúdo, nunca em diff textual.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from registry_sync.core.exceptions import ProdPatchNotAllowed
from registry_sync.core.model.data_structure import DataStructure, DataStructureId
from registry_sync.core.model.remote import Deployment, Environment, ListingEntry


@dataclass(frozen=True)
class ChangeContext:
    """Unidade sobre a qual o restante da reconciliação opera."""

    resource: DataStructure
    file_name: str
    remote_version: Optional[str] = None
    local_content_hash: Optional[str] = None
    remote_content_hash: Optional[str] = None

    @property
    def is_first_deploy(self) -> bool:
        return not self.remote_version

    def describe(self, operation: str) -> Dict[str, Any]:
        s = self.resource.parse_data().self_ref
        record: Dict[str, Any] = {
            "operation": operation,
            "file": self.file_name,
            "vendor": s.vendor,
            "name": s.name,
            "version": s.version,
        }
        if self.remote_version:
            record["remote_version"] = self.remote_version
        if self.local_content_hash:
            record["local_content_hash"] = self.local_content_hash
            record["remote_content_hash"] = self.remote_content_hash
        return record


@dataclass
class Changes:
    to_create: List[ChangeContext] = field(default_factory=list)
    to_update_meta: List[ChangeContext] = field(default_factory=list)
    to_update_new_version: List[ChangeContext] = field(default_factory=list)
    to_update_patch: List[ChangeContext] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.to_create or self.to_update_meta or self.to_update_new_version or self.to_update_patch
        )

    def counts(self) -> Dict[str, int]:
        return {
            "to_create": len(self.to_create),
            "to_update_meta": len(self.to_update_meta),
            "to_update_new_version": len(self.to_update_new_version),
            "to_update_patch": len(self.to_update_patch),
        }

    def summary(self) -> List[Dict[str, Any]]:
        """Registros estruturados de cada ação planejada, para o chamador renderizar."""
        out: List[Dict[str, Any]] = []
        out.extend(c.describe("update_meta") for c in self.to_update_meta)
        out.extend(c.describe("create") for c in self.to_create)
        out.extend(c.describe("new_version") for c in self.to_update_new_version)
        out.extend(c.describe("patch") for c in self.to_update_patch)
        return out


def _first_deployment(deployments: Iterable[Deployment], env: Environment) -> Optional[Deployment]:
    for d in deployments:
        if d.env == env:
            return d
    return None


def classify_changes(
    locals_by_file: Mapping[str, DataStructure],
    remote_listing: Iterable[ListingEntry],
    env: Environment,
) -> Changes:
    """
    Classifica data structures locais contra a listagem remota.

    Args:
        locals_by_file (Mapping[str, DataStructure]): arquivo → data structure local.
        remote_listing (Iterable[ListingEntry]): snapshot remoto.
        env (Environment): ambiente alvo (DEV ou PROD).

    Returns:
        Changes: buckets to_create, to_update_meta, to_update_new_version, to_update_patch.

    Raises:
        ResourceDecodeError: Se o bloco `self` de algum recurso não puder ser lido.
    """
    remotes: Dict[DataStructureId, ListingEntry] = {}
    for entry in remote_listing:
        remotes[entry.identity] = entry

    res = Changes()
    for file_name in sorted(locals_by_file):
        ds = locals_by_file[file_name]
        data = ds.parse_data()
        remote = remotes.get(data.self_ref.identity)

        if remote is None:
            res.to_create.append(ChangeContext(ds, file_name))
            continue

        if ds.meta != remote.meta:
            res.to_update_meta.append(ChangeContext(ds, file_name))

        local_hash = ds.content_hash()
        deployment = _first_deployment(remote.deployments, env)

        if deployment is None:
            res.to_update_new_version.append(ChangeContext(ds, file_name))
            continue

        if deployment.content_hash == local_hash:
            continue

        if data.self_ref.version != deployment.version:
            res.to_update_new_version.append(
                ChangeContext(ds, file_name, remote_version=deployment.version)
            )
        else:
            res.to_update_patch.append(
                ChangeContext(
                    ds,
                    file_name,
                    remote_version=deployment.version,
                    local_content_hash=local_hash,
                    remote_content_hash=deployment.content_hash,
                )
            )

    return res


def ensure_prod_promotable(changes: Changes) -> None:
    """
    Garante que um plano para PROD não contenha patches.

    Raises:
        ProdPatchNotAllowed: Se `to_update_patch` não estiver vazio.
    """
    if changes.to_update_patch:
        raise ProdPatchNotAllowed(
            message="patching is not available on prod. You must increment versions on dev before deploying",
            details={"files": [c.file_name for c in changes.to_update_patch]},
            hint="Incremente a versão em DEV antes de promover para PROD",
            decision_required=True,
        )
