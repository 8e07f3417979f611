# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_config).

Este módulo valida o comportamento do loader responsável por:
- partir dos defaults embutidos
- aplicar o arquivo de defaults do projeto
- aplicar o arquivo local de overrides (opcional)
- rejeitar formatos e estados inválidos

Decisões arquiteturais:
    - A configuração é declarativa e baseada em arquivos
    - Configuração local atua apenas como override explícito
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - A configuração final é sempre um dicionário
    - Nenhuma configuração parcial é retornada em caso de erro

Limites explícitos:
    - Não valida hashing de configuração
    - Não valida semântica (ver test_settings)
"""

import pytest
from pathlib import Path

try:
    from registry_sync.core.config.loader import load_config
    from registry_sync.core.config.errors import (
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    DefaultsNotFoundError = None
    InvalidConfigRootTypeError = None
    UnsupportedConfigFormatError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de configuração e suas exceções tipadas estejam disponíveis.

    Falha imediatamente, sem fallback, quando `loader` ou `errors` não
    podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config loader. Implement:\n"
            "- src/registry_sync/core/config/loader.py (load_config)\n"
            "- src/registry_sync/core/config/errors.py (typed errors)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_builtin_defaults_without_files():
    """Sem arquivos, a configuração efetiva são os defaults embutidos."""
    _require_imports()
    out = load_config()
    assert out["sync"]["target_env"] == "DEV"
    assert out["engine"]["fail_fast"] is True
    assert out["steps"] == {}


def test_missing_defaults_raises(tmp_path: Path):
    """
    Verifica que um arquivo de defaults informado e ausente é erro fatal.

    Invariantes:
        - A exceção utilizada é específica (`DefaultsNotFoundError`)
        - Nenhuma configuração parcial é retornada
    """
    _require_imports()
    missing = tmp_path / "defaults.yaml"
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(missing), local_path=None)


def test_missing_local_is_ok(tmp_path: Path, sync_config_defaults_yaml):
    """A configuração local é opcional: arquivo ausente não é erro."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(sync_config_defaults_yaml, encoding="utf-8")
    missing_local = tmp_path / "local.yaml"

    out = load_config(defaults_path=str(defaults), local_path=str(missing_local))

    assert out["engine"]["fail_fast"] is True
    assert out["sync"]["concurrency"] == 3
    assert out["steps"]["ds.validate_remote"]["enabled"] is True


def test_load_defaults_and_local(tmp_path: Path, sync_config_defaults_yaml, sync_config_local_yaml):
    """
    Verifica o carregamento e o merge de defaults + local.

    O resultado reflete:
    - valores sobrescritos pelo arquivo local
    - valores preservados do arquivo de defaults
    - valores embutidos não mencionados em nenhum arquivo
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(sync_config_defaults_yaml, encoding="utf-8")
    local.write_text(sync_config_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["sync"]["target_env"] == "PROD"
    assert out["sync"]["concurrency"] == 25
    assert out["steps"]["ds.validate_remote"]["enabled"] is False
    assert out["sync"]["alternatives_limit"] == 5
    assert out["sync"]["builtin_schemas"]


def test_json_config_is_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text('{"sync": {"validate_all": true}}', encoding="utf-8")

    out = load_config(defaults_path=str(defaults))

    assert out["sync"]["validate_all"] is True


def test_empty_file_is_empty_config(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")

    assert load_config(defaults_path=str(defaults)) == load_config()


def test_invalid_root_type_raises(tmp_path: Path):
    """Configurações com raiz não-dict levantam `InvalidConfigRootTypeError`."""
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- just\n- a\n- list\n", encoding="utf-8")
    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


def test_unsupported_extension_raises(tmp_path: Path):
    """Extensões não suportadas falham antes de qualquer parse ou merge."""
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("engine = { fail_fast = true }\n", encoding="utf-8")
    with pytest.raises(UnsupportedConfigFormatError):
        load_config(defaults_path=str(defaults), local_path=None)
