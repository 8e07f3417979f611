# src/registry_sync/core/config/hashing.py
"""
Hash canônico da configuração efetiva.

O hash identifica estruturalmente a configuração usada numa run e é
registrado nos eventos do RunContext. Reutiliza a mesma serialização
canônica do hash de conteúdo, de modo que configurações equivalentes
(independente da ordem das chaves) produzam o mesmo valor.
"""

import hashlib
from typing import Any, Dict

from registry_sync.core.identity import canonical_json


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera SHA-256 hexadecimal da configuração efetiva.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()
