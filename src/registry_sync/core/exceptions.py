"""
Registry Sync — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Registry Sync.

Objetivo:
- Permitir que componentes e Steps levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para SyncErrorPayload
- Evitar ValueError/RuntimeError genéricos em falhas estruturais

Regras:
- Exceções carregam apenas dados estruturados (serializáveis).
- Problemas de integridade referencial NÃO são exceções: viram diagnósticos.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SyncException(Exception):
    """Base class para exceções internas do Registry Sync.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Estruturais / parse
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MalformedVersion(SyncException):
    """Versão não segue o formato MODEL-REVISION-ADDITION."""


@dataclass(frozen=True)
class InvalidIgluUri(SyncException):
    """URI não segue o formato iglu:vendor/name/format/version."""


@dataclass(frozen=True)
class ResourceDecodeError(SyncException):
    """Documento local não pode ser materializado no registro tipado."""


@dataclass(frozen=True)
class ContentHashError(SyncException):
    """Payload não pode ser serializado de forma canônica."""


# ---------------------------------------------------------------------------
# Colaboradores externos
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExternalCallError(SyncException):
    """Falha em chamada externa (oracle, listagem, destinos). Fatal para a run."""


# ---------------------------------------------------------------------------
# Política de publicação
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProdPatchNotAllowed(SyncException):
    """Plano para PROD contém patches; patch só é permitido em DEV."""
