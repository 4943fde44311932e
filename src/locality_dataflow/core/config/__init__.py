# src/locality_dataflow/core/config/__init__.py

"""
Camada de configuração do Locality DataFlow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Conversão da seção `affinity` em `AffinitySettings` validadas

Princípios fundamentais:
    - Configuração não contém lógica de herança
    - Nenhuma heurística implícita durante merge
    - Configuração inválida falha cedo, nunca durante a geração de pod templates

Limites explícitos:
    - Não interage com registry, recorder ou composer diretamente
"""
