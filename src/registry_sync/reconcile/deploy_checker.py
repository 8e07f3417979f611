# src/registry_sync/reconcile/deploy_checker.py
"""
Schema Deploy Checker.

Responde se uma URI `iglu:vendor/name/format/version` está publicada em
algum lugar resolvível, consultando camadas em ordem (a primeira que
encontra vence):

    1. allow-list de schemas embutidos
    2. listagem do repositório central (match exato da URI)
    3. listagem da organização: mesma identidade e deployment DEV/PROD
       com a versão exata
    4. histórico completo de deployments do recurso, buscado sob demanda
       (uma vez por recurso, não por chamada)
    5. não encontrado: versões conhecidas diferentes viram alternativas

Sem match de (vendor, name, format) → não encontrado, sem alternativas.

Decisões arquiteturais:
    - URI estruturalmente inválida é erro (InvalidIgluUri)
    - Alternativas são devolvidas completas e ordenadas; truncar para
      exibição é papel do chamador (`format_alternatives`)
    - O cache de históricos é por instância (uma instância por run)

Limites explícitos:
    - Não valida o conteúdo do schema
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from registry_sync.core.constants import BUILTIN_SCHEMAS, IGLU_PREFIX
from registry_sync.core.exceptions import InvalidIgluUri
from registry_sync.core.model.data_structure import DataStructureId
from registry_sync.core.model.remote import Deployment, Environment, ListingEntry
from registry_sync.core.pipeline.collaborators import FetchDeployments

from .external import call_external


_IGLU_URI_RE = re.compile(r"^iglu:[a-zA-Z0-9\-_.]+/[a-zA-Z0-9\-_]+/[a-zA-Z0-9\-_]+/[0-9]+-[0-9]+-[0-9]+$")

_PUBLISHED_ENVS = (Environment.DEV, Environment.PROD)


def is_valid_iglu_uri(uri: str) -> bool:
    return isinstance(uri, str) and _IGLU_URI_RE.match(uri) is not None


def split_iglu_uri(uri: str) -> Tuple[DataStructureId, str]:
    """
    Separa `iglu:vendor/name/format/version` em identidade e versão.

    Raises:
        InvalidIgluUri: Se a URI não tiver exatamente quatro partes.
    """
    body = uri[len(IGLU_PREFIX):] if uri.startswith(IGLU_PREFIX) else uri
    parts = body.split("/")
    if len(parts) != 4 or not all(parts):
        raise InvalidIgluUri(
            message=f"invalid iglu uri {uri!r}",
            details={"uri": uri, "parts": len(parts)},
            hint="Use iglu:vendor/name/format/version, e.g. iglu:io.snowplow/login/jsonschema/1-0-0",
        )
    return DataStructureId(parts[0], parts[1], parts[2]), parts[3]


def format_alternatives(versions: Sequence[str], limit: int = 5) -> str:
    """Renderiza versões para exibição: `a, b, c, d, e, ...N more`."""
    shown = list(versions)
    if len(shown) > limit:
        return f"{', '.join(shown[:limit])}, ...{len(shown) - limit} more"
    return ", ".join(shown)


@dataclass(frozen=True)
class DeployCheck:
    found: bool
    alternative_versions: List[str] = field(default_factory=list)


def _version_key(version: str):
    parts = version.split("-")
    if len(parts) == 3 and all(p.isdigit() for p in parts):
        return (0, tuple(int(p) for p in parts), version)
    return (1, (), version)


def _published_at(deployments: Iterable[Deployment], version: str) -> bool:
    return any(d.version == version and d.env in _PUBLISHED_ENVS for d in deployments)


class SchemaDeployChecker:
    """Resolvedor em camadas de publicação de schemas iglu."""

    def __init__(
        self,
        *,
        central_listing: Iterable[str] = (),
        listing: Iterable[ListingEntry] = (),
        fetch_deployments: Optional[FetchDeployments] = None,
        builtin_schemas: Iterable[str] = BUILTIN_SCHEMAS,
    ):
        self._builtins: Set[str] = set(builtin_schemas)
        self._central: Set[str] = set(central_listing)
        self._by_identity: Dict[DataStructureId, ListingEntry] = {}
        for entry in listing:
            # entradas duplicadas: vale a primeira da listagem
            self._by_identity.setdefault(entry.identity, entry)
        self._fetch = fetch_deployments
        self._history: Dict[str, List[Deployment]] = {}

    def _full_history(self, entry: ListingEntry) -> List[Deployment]:
        if entry.hash not in self._history:
            if self._fetch is None:
                self._history[entry.hash] = list(entry.deployments)
            else:
                fetched = call_external("fetch_deployments", self._fetch, entry.hash)
                self._history[entry.hash] = list(fetched)
        return self._history[entry.hash]

    @property
    def fetch_count(self) -> int:
        return len(self._history)

    def is_deployed(self, uri: str) -> DeployCheck:
        """
        Verifica se `uri` está publicada.

        Returns:
            DeployCheck: `found` e, quando não encontrado mas o recurso existe,
            as demais versões conhecidas (ordenadas) em `alternative_versions`.

        Raises:
            InvalidIgluUri: Se a URI não tiver o formato esperado.
            ExternalCallError: Se a busca do histórico de deployments falhar.
        """
        identity, version = split_iglu_uri(uri)

        if uri in self._builtins:
            return DeployCheck(found=True)

        if uri in self._central:
            return DeployCheck(found=True)

        entry = self._by_identity.get(identity)
        if entry is None:
            return DeployCheck(found=False)

        if _published_at(entry.deployments, version):
            return DeployCheck(found=True)

        history = self._full_history(entry)
        if _published_at(history, version):
            return DeployCheck(found=True)

        known = {d.version for d in list(entry.deployments) + history if d.version}
        known.discard(version)
        return DeployCheck(found=False, alternative_versions=sorted(known, key=_version_key))
