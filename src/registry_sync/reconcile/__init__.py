# src/registry_sync/reconcile/__init__.py
"""
Camada de reconciliação do Registry Sync.

Componentes (ordem de dependência):
    - deploy_checker   → onde um schema iglu está publicado
    - references       → resolução de `$ref` entre data products e source apps
    - changes          → classificação de data structures locais vs. listagem remota
    - migrations       → suficiência do incremento de versão por destino
    - local_validation → validação estrutural de data structures locais
    - dp_validation    → forma, cardinalidade, deploy e compatibilidade de DPs/SAs
    - remote_validation → oracle de validação + migration advisor
    - data_products    → change set e plano de purge de data products

Todos os componentes são funções puras sobre seus inputs; chamadas
externas chegam como colaboradores explícitos.
"""
