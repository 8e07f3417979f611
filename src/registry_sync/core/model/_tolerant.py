"""Leitores tolerantes de árvores decodificadas (chave ausente ou tipo errado → default)."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional


def as_mapping(value: Any) -> Dict[str, Any]:
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return {}


def as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def as_str(value: Any, default: str = "") -> str:
    if isinstance(value, str):
        return value
    return default


def as_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    return default


def as_opt_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def as_str_map(value: Any) -> Dict[str, str]:
    return {str(k): str(v) for k, v in as_mapping(value).items() if v is not None}


def as_str_list(value: Any) -> List[str]:
    return [v for v in as_list(value) if isinstance(v, str)]
