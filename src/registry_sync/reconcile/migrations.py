# src/registry_sync/reconcile/migrations.py
"""
Migration Advisor.

Para cada data structure com nova versão ou patch, e para cada destino
conhecido, consulta o oracle de migração com a identidade remota
(`self` na versão remota) e o payload local. Se a mudança detectada
exigir uma versão maior do que a escolhida pelo autor, emite um
MigrationReport com a versão sugerida.

Regra de supressão:
    - changeType "no-change" → nada
    - required = bump(remote_version, changeType)
    - report apenas se required > versão local
  O advisor reporta deficiências, não toda mudança detectada.

Decisões arquiteturais:
    - Contextos sem versão remota (primeiro deploy no ambiente) não têm
      baseline e são ignorados
    - Falhas do oracle ou da listagem de destinos abortam a run

Limites explícitos:
    - Não publica nem corrige versões
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from registry_sync.core.pipeline.collaborators import ListDestinations, MigrationOracle
from registry_sync.core.semver import (
    NO_CHANGE,
    bump_version,
    compare_versions,
    parse_version,
)

from .changes import ChangeContext, Changes
from .external import call_external


@dataclass(frozen=True)
class MigrationReport:
    destination_type: str
    suggested_version: str
    messages: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "destinationType": self.destination_type,
            "suggestedVersion": self.suggested_version,
            "messages": list(self.messages),
        }


@dataclass(frozen=True)
class FileMigrationReport:
    file_name: str
    report: MigrationReport


def fetch_destinations(list_destinations: ListDestinations) -> List[str]:
    """Lista destinos via colaborador; falhas viram ExternalCallError."""
    return list(call_external("list_destinations", list_destinations))


def advise_migrations(
    context: ChangeContext,
    destinations: Sequence[str],
    migration_oracle: MigrationOracle,
) -> Dict[str, MigrationReport]:
    """
    Verifica a suficiência da versão local de `context` para cada destino.

    Args:
        context (ChangeContext): recurso com nova versão ou patch.
        destinations (Sequence[str]): tipos de destino conhecidos.
        migration_oracle (MigrationOracle): oracle de classificação de mudança.

    Returns:
        Dict[str, MigrationReport]: destino → report (apenas destinos deficientes).

    Raises:
        MalformedVersion: Se a versão local ou remota for inválida.
        ExternalCallError: Se o oracle falhar.
    """
    if context.is_first_deploy:
        return {}

    data = context.resource.parse_data()
    local_version = parse_version(data.self_ref.version)
    remote_version = parse_version(context.remote_version)
    source_self = data.self_ref.with_version(context.remote_version)

    reports: Dict[str, MigrationReport] = {}
    for destination in destinations:
        check = call_external(
            "migration_oracle",
            migration_oracle,
            destination,
            source_self,
            context.resource.data,
        )
        if check.change_type == NO_CHANGE:
            continue

        required = bump_version(remote_version, check.change_type)
        if compare_versions(required, local_version) == 1:
            reports[destination] = MigrationReport(
                destination_type=destination,
                suggested_version=str(required),
                messages=[m.message for m in check.migrations],
            )

    return reports


def advise_all(
    contexts: Iterable[ChangeContext],
    destinations: Sequence[str],
    migration_oracle: MigrationOracle,
) -> List[FileMigrationReport]:
    """Aplica `advise_migrations` a cada contexto, na ordem recebida e por destino."""
    out: List[FileMigrationReport] = []
    for ctx in contexts:
        for report in advise_migrations(ctx, destinations, migration_oracle).values():
            out.append(FileMigrationReport(file_name=ctx.file_name, report=report))
    return out


def contexts_to_advise(changes: Changes) -> List[ChangeContext]:
    return list(changes.to_update_new_version) + list(changes.to_update_patch)
