# src/registry_sync/core/__init__.py
"""
Núcleo do Registry Sync.

Contém os blocos sem dependência de domínio de reconciliação:
versões, identidade de conteúdo, modelos, configuração, erros e a
infraestrutura de pipeline (contexto, Steps, planner e engine).
"""
