# src/locality_dataflow/core/__init__.py
"""
Core do Locality DataFlow.

Reúne a implementação canônica da herança de afinidade e os tipos e
utilitários de que ela depende.

O core é projetado para ser:
    - determinístico (mesmos inputs, mesma afinidade)
    - tolerante a dados ausentes (degrada para "sem herança")
    - independente de cliente de cluster, CRDs ou renderizadores

Limites explícitos:
    - Não executa reconciliação
    - Não persiste status
"""
