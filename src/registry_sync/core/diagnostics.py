# src/registry_sync/core/diagnostics.py
"""
Diagnósticos por arquivo.

Problemas de integridade referencial, de forma e de compatibilidade não
interrompem o processamento: são acumulados por arquivo de origem, com
caminho estruturado (JSON pointer) quando aplicável, para que validações
em lote sejam reportadas arquivo a arquivo.

Níveis:
    - errors / errors_with_paths     → bloqueiam publicação
    - warnings / warnings_with_paths → não bloqueiam
    - info / debug                   → apenas informativos

Invariantes:
    - Contagem de erros = len(errors) + len(errors_with_paths)
    - `merge` preserva a ordem de inserção

Limites explícitos:
    - Não imprime nem registra logs
    - Não decide se a run falha (responsabilidade dos Steps)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List


@dataclass
class FileValidations:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)
    debug: List[str] = field(default_factory=list)
    errors_with_paths: Dict[str, List[str]] = field(default_factory=dict)
    warnings_with_paths: Dict[str, List[str]] = field(default_factory=dict)

    def merge(self, other: "FileValidations") -> "FileValidations":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.info.extend(other.info)
        self.debug.extend(other.debug)
        for path, msgs in other.errors_with_paths.items():
            self.errors_with_paths.setdefault(path, []).extend(msgs)
        for path, msgs in other.warnings_with_paths.items():
            self.warnings_with_paths.setdefault(path, []).extend(msgs)
        return self

    def add_path_error(self, path: str, message: str) -> None:
        self.errors_with_paths.setdefault(path, []).append(message)

    def add_path_warning(self, path: str, message: str) -> None:
        self.warnings_with_paths.setdefault(path, []).append(message)

    def error_count(self) -> int:
        return len(self.errors) + len(self.errors_with_paths)

    def has_errors(self) -> bool:
        return self.error_count() > 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "info": list(self.info),
            "debug": list(self.debug),
            "errors_with_paths": {k: list(v) for k, v in sorted(self.errors_with_paths.items())},
            "warnings_with_paths": {k: list(v) for k, v in sorted(self.warnings_with_paths.items())},
        }


def total_error_count(validations: Iterable[FileValidations]) -> int:
    return sum(v.error_count() for v in validations)


def github_annotations(file: str, v: FileValidations) -> List[str]:
    """Renderiza as validações de um arquivo como linhas de annotation do GitHub Actions."""
    lines: List[str] = []
    if v.info:
        lines.append(f"::notice file={file}::{'%0A'.join(v.info)}")
    if v.warnings:
        lines.append(f"::warning file={file}::{'%0A'.join(v.warnings)}")
    for path, msgs in sorted(v.warnings_with_paths.items()):
        lines.append(f"::warning file={file}::{path}%0A{'%0A'.join(msgs)}")
    if v.errors:
        lines.append(f"::error file={file}::{'%0A'.join(v.errors)}")
    for path, msgs in sorted(v.errors_with_paths.items()):
        lines.append(f"::error file={file}::{path}%0A{'%0A'.join(msgs)}")
    return lines
