# src/registry_sync/core/config/settings.py
"""
Materialização tipada da configuração efetiva.

Seção `sync` (v1):
    - target_env          → ambiente alvo da classificação (DEV | PROD)
    - concurrency         → limite de chamadas externas simultâneas (1..10)
    - validate_all        → valida compatibilidade de todos os data products,
                            não apenas os alterados
    - alternatives_limit  → quantas versões alternativas exibir em diagnósticos
    - builtin_schemas     → URIs sempre consideradas publicadas

Decisões arquiteturais:
    - `concurrency` fora do intervalo é ajustado (clamp), não rejeitado;
      o valor pedido fica em `requested_concurrency` para registro
    - Tipos errados são rejeitados com `InvalidSettingError`

Limites explícitos:
    - Não carrega arquivos (ver loader)
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from registry_sync.core.constants import BUILTIN_SCHEMAS
from registry_sync.core.model.remote import Environment

from .errors import InvalidSettingError


MIN_CONCURRENCY = 1
MAX_CONCURRENCY = 10


def clamp_concurrency(value: int) -> int:
    if value > MAX_CONCURRENCY:
        return MAX_CONCURRENCY
    if value < MIN_CONCURRENCY:
        return MIN_CONCURRENCY
    return value


_DEFAULTS: Dict[str, Any] = {
    "sync": {
        "target_env": "DEV",
        "concurrency": 3,
        "validate_all": False,
        "alternatives_limit": 5,
        "builtin_schemas": list(BUILTIN_SCHEMAS),
    },
    "engine": {
        "fail_fast": True,
    },
    "steps": {},
}


@dataclass(frozen=True)
class Settings:
    target_env: Environment = Environment.DEV
    concurrency: int = 3
    requested_concurrency: int = 3
    validate_all: bool = False
    alternatives_limit: int = 5
    builtin_schemas: Tuple[str, ...] = field(default_factory=lambda: tuple(BUILTIN_SCHEMAS))

    @staticmethod
    def default_config() -> Dict[str, Any]:
        return deepcopy(_DEFAULTS)

    @property
    def concurrency_clamped(self) -> bool:
        return self.concurrency != self.requested_concurrency

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Settings":
        """
        Constrói Settings a partir da seção `sync` da configuração efetiva.

        Raises:
            InvalidSettingError: Se algum valor tiver tipo ou domínio inválido.
        """
        sync = (config or {}).get("sync", {}) or {}
        if not isinstance(sync, dict):
            raise InvalidSettingError(f"sync deve ser dict, recebido: {type(sync).__name__}")

        env_raw = sync.get("target_env", "DEV")
        env = Environment.parse(env_raw)
        if env not in (Environment.DEV, Environment.PROD):
            raise InvalidSettingError(f"sync.target_env inválido: {env_raw!r} (use DEV ou PROD)")

        requested = sync.get("concurrency", 3)
        if isinstance(requested, bool) or not isinstance(requested, int):
            raise InvalidSettingError(f"sync.concurrency deve ser int, recebido: {requested!r}")

        validate_all = sync.get("validate_all", False)
        if not isinstance(validate_all, bool):
            raise InvalidSettingError(f"sync.validate_all deve ser bool, recebido: {validate_all!r}")

        limit = sync.get("alternatives_limit", 5)
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidSettingError(f"sync.alternatives_limit deve ser int >= 1, recebido: {limit!r}")

        builtins = sync.get("builtin_schemas", list(BUILTIN_SCHEMAS))
        if not isinstance(builtins, list) or not all(isinstance(b, str) for b in builtins):
            raise InvalidSettingError("sync.builtin_schemas deve ser lista de strings")

        return cls(
            target_env=env,
            concurrency=clamp_concurrency(requested),
            requested_concurrency=requested,
            validate_all=validate_all,
            alternatives_limit=limit,
            builtin_schemas=tuple(builtins),
        )
