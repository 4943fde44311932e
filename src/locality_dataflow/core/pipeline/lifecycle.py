# src/locality_dataflow/core/pipeline/lifecycle.py
"""
Máquina de estados de uma execução de Operation.

    Pending → Scheduled → Running → {Succeeded, Failed}
    Scheduled → Failed

A transição para `Scheduled` com registro de placement facts pertence ao
recorder (`core.affinity.recorder.record_placement`). Este módulo cobre as
demais transições e o reinício de uma execução.

Invariantes:
    - Funções são puras: devolvem uma nova Operation
    - `restart` descarta os facts da execução anterior; uma execução nova
      nunca enxerga facts de uma tentativa anterior
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, FrozenSet

from locality_dataflow.core.errors import phase_transition_invalid
from locality_dataflow.core.exceptions import InvalidPhaseTransition

from .types import Operation, OperationPhase, OperationStatus


ALLOWED_TRANSITIONS: Dict[OperationPhase, FrozenSet[OperationPhase]] = {
    OperationPhase.PENDING: frozenset({OperationPhase.SCHEDULED}),
    OperationPhase.SCHEDULED: frozenset({OperationPhase.RUNNING, OperationPhase.FAILED}),
    OperationPhase.RUNNING: frozenset({OperationPhase.SUCCEEDED, OperationPhase.FAILED}),
    OperationPhase.SUCCEEDED: frozenset(),
    OperationPhase.FAILED: frozenset(),
}


def can_transition(current: OperationPhase, target: OperationPhase) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(operation: Operation, target: OperationPhase) -> Operation:
    """
    Avança a fase da execução atual, preservando facts e run_id.

    Raises:
        InvalidPhaseTransition: Se a transição não existir na máquina de estados.
    """
    current = operation.status.phase
    if not can_transition(current, target):
        payload = phase_transition_invalid(
            key=operation.key, current=current.value, target=target.value
        )
        raise InvalidPhaseTransition(
            message=payload.message, details=payload.details, hint=payload.hint
        )
    return replace(operation, status=replace(operation.status, phase=target))


def restart(operation: Operation) -> Operation:
    """Inicia uma nova execução: volta a `Pending` sem facts, nó ou run_id."""
    return replace(operation, status=OperationStatus())
