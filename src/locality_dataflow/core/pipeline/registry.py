# src/locality_dataflow/core/pipeline/registry.py
"""
Registro de Operations do pipeline.

Este módulo define o `OperationRegistry`, um snapshot em memória das
Operations conhecidas (spec + status da execução atual), indexado por
`namespace/name`.

O registry cumpre dois papéis:
    - validação estrutural da cadeia runAfter (sem ciclos), feita no
      momento da configuração, para que a herança possa assumir exatamente
      um predecessor direto
    - fonte do snapshot do predecessor no momento da geração do pod template

Decisões arquiteturais:
    - O pipeline é uma lista encadeada por ponteiros de predecessor,
      não um DAG genérico
    - Predecessor ausente do registry não é erro (ex.: Operation removida);
      a herança simplesmente não encontra facts
    - `update` substitui o snapshot inteiro; não há merge de status

Invariantes:
    - Cada Operation registrada possui chave única
    - A lista de Operations reflete a ordem de registro

Limites explícitos:
    - Não calcula afinidade
    - Não executa reconciliação nem requeue
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from locality_dataflow.core.errors import operation_not_found, predecessor_cycle
from locality_dataflow.core.exceptions import OperationNotFound, PredecessorCycleError

from .types import Operation


class DuplicateOperationError(ValueError):
    """
    Exceção levantada quando uma Operation com a mesma chave já existe.

    A duplicidade é tratada como erro fatal de configuração e detectada no
    momento do registro.
    """


@dataclass
class OperationRegistry:
    """
    Snapshot canônico das Operations conhecidas.

    Decisões arquiteturais:
        - A ordem de inserção é preservada separadamente
        - A estrutura interna não é exposta diretamente
        - Erros estruturais são tratados como falhas fatais
    """

    _operations: Dict[str, Operation] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, operation: Operation) -> None:
        name = getattr(operation, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("operation.name must be a non-empty string")

        key = operation.key
        if key in self._operations:
            raise DuplicateOperationError(f"Duplicate operation: {key}")

        self._operations[key] = operation
        self._order.append(key)

    def update(self, operation: Operation) -> None:
        key = operation.key
        if key not in self._operations:
            payload = operation_not_found(key=key)
            raise OperationNotFound(message=payload.message, details=payload.details, hint=payload.hint)
        self._operations[key] = operation

    def get(self, key: str) -> Operation:
        return self._operations[key]

    def find(self, key: Optional[str]) -> Optional[Operation]:
        if key is None:
            return None
        return self._operations.get(key)

    def list(self) -> List[Operation]:
        return [self._operations[k] for k in self._order]

    def predecessor_of(self, operation: Operation) -> Optional[Operation]:
        """Snapshot atual do predecessor direto, ou None se não declarado/ausente."""
        return self.find(operation.predecessor_key)

    def chain_of(self, operation: Operation) -> List[Operation]:
        """
        Cadeia de predecessores da raiz até `operation` (inclusive).

        A caminhada para no primeiro predecessor ausente do registry.

        Raises:
            PredecessorCycleError: Se a cadeia retornar a uma Operation já visitada.
        """
        chain: List[Operation] = [operation]
        seen = {operation.key}
        current = operation
        while True:
            pred_key = current.predecessor_key
            if pred_key is None:
                break
            if pred_key in seen:
                keys = [op.key for op in chain] + [pred_key]
                payload = predecessor_cycle(chain=keys)
                raise PredecessorCycleError(
                    message=payload.message, details=payload.details, hint=payload.hint
                )
            pred = self.find(pred_key)
            if pred is None:
                break
            chain.append(pred)
            seen.add(pred_key)
            current = pred
        chain.reverse()
        return chain

    def validate_chain(self) -> None:
        """
        Valida que nenhuma cadeia runAfter forma ciclo.

        Raises:
            PredecessorCycleError: No primeiro ciclo encontrado (ordem de registro).
        """
        for key in self._order:
            self.chain_of(self._operations[key])
