# src/registry_sync/core/identity.py
"""
Identidade de conteúdo (Content Identity) do Registry Sync.

Este módulo implementa o hash canônico do payload versionado (`data`) de
uma data structure e o identificador de recurso usado pelo registry.

O digest precisa coincidir bit a bit com o calculado por um serviço
remoto mantido de forma independente; por isso a serialização canônica
é explícita e não depende do comportamento default de `json.dumps`.

Política de serialização canônica (v1):
    - Chaves ordenadas recursivamente (ordem de code point == ordem de bytes UTF-8)
    - Arrays preservam a ordem de entrada
    - Sem escape HTML de `<`, `>`, `&`
    - Não-ASCII emitido como UTF-8 literal (sem `\\uXXXX`)
    - U+2028 e U+2029 escapados, como no serviço remoto
    - Separadores compactos, sem newline final
    - Floats com os dígitos mínimos de round-trip, em notação decimal
      entre 1e-6 e 1e21 (`10.0` → `10`) e exponencial fora dela (`1e-7`)
    - Digest SHA-256 em hexadecimal minúsculo

Decisões arquiteturais:
    - Apenas `data` participa do hash; `meta` é mutável e não versionado
    - NaN/Infinity são rejeitados (não existem em JSON)

Invariantes:
    - Payloads estruturalmente equivalentes produzem o mesmo hash,
      independentemente da ordem de inserção das chaves
    - Nenhuma mutação ocorre sobre o input

Limites explícitos:
    - Não decide se um recurso mudou (responsabilidade do Change Classifier)
    - Não carrega documentos

Este módulo existe para garantir detecção de mudança
endereçada por conteúdo, estável entre implementações.
"""

from __future__ import annotations

import hashlib
import json
import math
from decimal import Decimal
from typing import Any, Mapping

from registry_sync.core.exceptions import ContentHashError


# Fora de [1e-6, 1e21) o serviço remoto usa notação exponencial.
_EXPONENT_LOWER = 1e-6
_EXPONENT_UPPER = 1e21


def _format_float(value: float) -> str:
    """
    Formata um float como o encoder JSON do serviço remoto.

    Dígitos: a menor representação que faz round-trip (`repr`).
    Notação:
        - decimal expandida para 1e-6 <= |x| < 1e21, sem zeros à direita
          (`1.2345678901234567e20` → `123456789012345670000`, `10.0` → `10`)
        - exponencial fora desse intervalo, expoente sem zero à esquerda
          (`1e-07` → `1e-7`; `1e+21` permanece)

    Raises:
        ValueError: Para NaN e Infinity.
    """
    if not math.isfinite(value):
        raise ValueError(f"Out of range float values are not JSON compliant: {value!r}")

    text = repr(value)
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < _EXPONENT_LOWER or magnitude >= _EXPONENT_UPPER):
        if len(text) >= 4 and text[-4] == "e" and text[-3] == "-" and text[-2] == "0":
            text = text[:-2] + text[-1]
        return text

    text = format(Decimal(text), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _encode_string(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def _encode(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return _encode_string(value)
    if isinstance(value, Mapping):
        items = sorted(((str(k), v) for k, v in value.items()), key=lambda kv: kv[0])
        return "{" + ",".join(f"{_encode_string(k)}:{_encode(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(v) for v in value) + "]"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(payload: Any) -> str:
    """
    Serializa `payload` em JSON canônico.

    Args:
        payload (Any): Estrutura JSON-compatível.

    Returns:
        str: JSON canônico (sem newline final).

    Raises:
        ContentHashError: Se algum valor não for serializável em JSON.
    """
    try:
        return _encode(payload)
    except (TypeError, ValueError) as e:
        raise ContentHashError(
            message=f"payload is not canonically serializable: {e}",
            details={"exc_type": e.__class__.__name__},
            hint="Remove non-JSON values (objects, NaN, Infinity) from the payload",
        ) from e


def compute_content_hash(payload: Mapping[str, Any]) -> str:
    """
    Gera o hash de conteúdo do payload `data` de uma data structure.

    Args:
        payload (Mapping[str, Any]): Bloco `data` do recurso (sem `meta`).

    Returns:
        str: SHA-256 hexadecimal (64 caracteres, minúsculo).

    Raises:
        TypeError: Se o payload não for um mapeamento.
        ContentHashError: Se o payload não puder ser serializado.
    """
    if not isinstance(payload, Mapping):
        raise TypeError(
            f"payload para hashing deve ser mapping, recebido: {type(payload).__name__}"
        )

    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def compute_resource_hash(org_id: str, vendor: str, name: str, format: str) -> str:
    """Identificador de data structure no registry: sha256 de `org-vendor-name-format`."""
    raw = f"{org_id}-{vendor}-{name}-{format}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
