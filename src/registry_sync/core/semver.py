# src/registry_sync/core/semver.py
"""
SemVer Engine do Registry Sync.

Este módulo implementa o esquema de versionamento MODEL-REVISION-ADDITION
utilizado por data structures no registry.

Uma versão é composta por três inteiros não negativos serializados
como `"M-R-A"` (ex.: `"1-0-0"`).

Operações:
    - parse_version   → texto `"M-R-A"` para SchemaVersion
    - compare_versions → -1 | 0 | 1 por (model, revision, addition)
    - bump_version    → incremento por classe de mudança

Classes de mudança (nomenclatura do registry, não de semver):
    - major    → (model + 1, 0, 0)
    - revision → (model, revision + 1, 0)
    - minor    → (model, revision, addition + 1)
    - qualquer outro valor (ex.: "no-change") → identidade

Invariantes:
    - A comparação é numérica, nunca textual ("10-0-0" > "9-0-0")
    - SchemaVersion é imutável e totalmente ordenável
    - bump nunca falha: classes desconhecidas são no-op reconhecido

Limites explícitos:
    - Não conhece recursos, deployments ou ambientes
    - Não decide suficiência de versão (responsabilidade do Migration Advisor)

Este módulo existe para garantir aritmética de versões
previsível e livre de comparações textuais.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from registry_sync.core.exceptions import MalformedVersion


BUMP_MAJOR = "major"
BUMP_REVISION = "revision"
BUMP_MINOR = "minor"
NO_CHANGE = "no-change"


@dataclass(frozen=True, order=True)
class SchemaVersion:
    """Versão MODEL-REVISION-ADDITION imutável e ordenável."""

    model: int
    revision: int
    addition: int

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.model, self.revision, self.addition)

    def __str__(self) -> str:
        return f"{self.model}-{self.revision}-{self.addition}"


def parse_version(text: str) -> SchemaVersion:
    """
    Converte `"M-R-A"` em SchemaVersion.

    Cada segmento deve ser um inteiro não negativo composto apenas por
    dígitos; sinais, espaços e segmentos vazios são rejeitados.

    Args:
        text (str): Versão textual.

    Returns:
        SchemaVersion: Versão materializada.

    Raises:
        MalformedVersion: Se faltar segmento, houver segmento extra ou não numérico.
    """
    if not isinstance(text, str):
        raise MalformedVersion(
            message=f"version must be a string, got {type(text).__name__}",
            details={"version": repr(text)},
        )

    parts = text.split("-")
    if len(parts) != 3:
        raise MalformedVersion(
            message=f"malformed version {text!r}: expected MODEL-REVISION-ADDITION",
            details={"version": text, "segments": len(parts)},
            hint="Use three numeric segments, e.g. 1-0-0",
        )

    values = []
    for idx, part in enumerate(parts):
        if not part.isdigit() or not part.isascii():
            raise MalformedVersion(
                message=f"malformed version {text!r}: segment {idx} is not a non-negative integer",
                details={"version": text, "segment": idx, "value": part},
                hint="Use three numeric segments, e.g. 1-0-0",
            )
        values.append(int(part))

    return SchemaVersion(values[0], values[1], values[2])


def compare_versions(a: SchemaVersion, b: SchemaVersion) -> int:
    """Retorna -1, 0 ou 1 comparando model, revision e addition nessa ordem."""
    ta, tb = a.as_tuple(), b.as_tuple()
    if ta > tb:
        return 1
    if ta < tb:
        return -1
    return 0


def bump_version(v: SchemaVersion, kind: str) -> SchemaVersion:
    """Aplica a classe de mudança `kind`; classes desconhecidas retornam `v`."""
    if kind == BUMP_MAJOR:
        return SchemaVersion(v.model + 1, 0, 0)
    if kind == BUMP_REVISION:
        return SchemaVersion(v.model, v.revision + 1, 0)
    if kind == BUMP_MINOR:
        return SchemaVersion(v.model, v.revision, v.addition + 1)
    return v
