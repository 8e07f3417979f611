# src/registry_sync/core/config/__init__.py
"""
Camada de configuração do Registry Sync.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução via deep-merge determinístico
    - Hash canônico da configuração efetiva
    - Materialização tipada (`Settings`) com limites seguros

Princípios fundamentais:
    - Configuração não contém lógica de reconciliação
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não executa pipeline
    - Não interage com colaboradores externos
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge
from .settings import Settings, clamp_concurrency

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidSettingError",
    "Settings",
    "UnsupportedConfigFormatError",
    "clamp_concurrency",
    "compute_config_hash",
    "deep_merge",
    "load_config",
]
