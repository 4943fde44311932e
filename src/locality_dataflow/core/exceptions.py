"""
Locality DataFlow — Canonical Exceptions (v1)

Exceções tipadas levantadas pelos colaboradores estruturais (registry de
Operations e ciclo de vida). O cálculo de herança de afinidade nunca levanta
nenhuma delas: toda falha ali degrada para "sem afinidade herdada".

Regras:
- Exceções carregam apenas dados estruturados (serializáveis).
- `to_payload()` produz o `LocalityErrorPayload` correspondente.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import (
    LocalityErrorPayload,
    OPERATION_NOT_FOUND,
    PHASE_TRANSITION_INVALID,
    PREDECESSOR_CYCLE,
)


@dataclass(frozen=True)
class LocalityException(Exception):
    """Base class para exceções internas do Locality DataFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    code = "LOCALITY_ERROR"

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def to_payload(self) -> LocalityErrorPayload:
        return LocalityErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
            fatal=True,
        )


@dataclass(frozen=True)
class OperationNotFound(LocalityException):
    """Operation referenciada não existe no registry."""

    code = OPERATION_NOT_FOUND


@dataclass(frozen=True)
class PredecessorCycleError(LocalityException):
    """Cadeia runAfter forma um ciclo (inclui auto-referência)."""

    code = PREDECESSOR_CYCLE


@dataclass(frozen=True)
class InvalidPhaseTransition(LocalityException):
    """Transição de fase fora da máquina de estados da Operation."""

    code = PHASE_TRANSITION_INVALID
