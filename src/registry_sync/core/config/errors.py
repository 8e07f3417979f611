# src/registry_sync/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Registry Sync.

Todas herdam de `ConfigError`, permitindo captura genérica de falhas de
configuração sem confundi-las com falhas de reconciliação ou de
colaboradores externos. Erros de configuração são sempre fatais: não há
fallback nem recuperação automática.
"""


class ConfigError(Exception):
    """Exceção base para erros de configuração."""


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório quando informado: sua ausência
    indica erro de instalação, não uma configuração vazia.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"engine": {"fail_fast": true}}
        - override: {"engine": "off"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidSettingError(ConfigError):
    """Valor de configuração com tipo ou domínio inválido (ex.: ambiente desconhecido)."""
