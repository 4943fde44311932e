# src/locality_dataflow/core/pipeline/__init__.py
"""
# Pipeline Core — Locality DataFlow

Este pacote define as estruturas fundamentais que descrevem Operations
encadeadas por runAfter.

## Componentes

- **types**
  - `Operation`, `OperationSpec`, `OperationStatus`, `OperationPhase`
  - `PredecessorRef`, `AffinityStrategy`, `AffinityPolicy`, `PreferredLabel`

- **lifecycle**
  - `transition`, `restart`: máquina de estados de uma execução

- **registry**
  - `OperationRegistry`: snapshot por chave e validação da cadeia runAfter

- **context**
  - `RunContext`: logs estruturados e warnings por Operation

## Limites Explícitos

- Não calcula afinidade (ver `core.affinity`)
- Não executa reconciliação nem fala com o scheduler
"""
