# src/registry_sync/__init__.py
"""
Registry Sync — reconciliação determinística entre recursos locais e um registry remoto.

Este pacote raiz define o namespace público do Registry Sync, uma
biblioteca que compara recursos declarativos escritos localmente
(data structures, data products e source applications) com o estado
mantido por um registry remoto e decide o que deve ser criado,
atualizado, corrigido ou deixado como está.

Princípios centrais:
    - Toda decisão é recomputada a partir de dois snapshots (local e remoto)
    - Componentes do núcleo são funções puras sobre seus inputs
    - Chamadas externas são colaboradores explícitos, nunca estado global
    - Diagnósticos são sempre atribuídos a um arquivo de origem

Arquitetura em alto nível:
    - core.semver       → parse, comparação e incremento de versões M-R-A
    - core.identity     → hash canônico de conteúdo e de recurso
    - core.model        → registros tipados de recursos locais e remotos
    - core.config       → carregamento, merge e hashing de configuração
    - core.pipeline     → protocolos, contexto de execução e registro de Steps
    - core.engine       → planejamento (DAG) e execução do pipeline
    - reconcile         → classificação, referências, migrações e validações
    - steps             → Steps canônicos que orquestram a reconciliação

Limites explícitos:
    - Não realiza I/O de rede
    - Não escreve arquivos
    - Não interpreta argumentos de linha de comando

Este módulo existe para estabelecer o namespace do Registry Sync,
servindo como ponto de entrada lógico da biblioteca.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
