# src/locality_dataflow/core/affinity/inheritance.py
"""
Herança de afinidade: resolver → translator → composer.

Este módulo expõe a capacidade única usada por todo gerador de pod
template, independente do engine da Operation:

    "dada uma afinidade base, o status do predecessor e uma estratégia,
     produza a afinidade composta"

Princípios fundamentais:
    - Uma única implementação, chamada uniformemente por todos os geradores
    - Cálculo síncrono e puro sobre um snapshot do status do predecessor
    - Qualquer dado ausente ou inaplicável degrada para "sem herança"

Invariantes:
    - Política NONE → resultado igual à afinidade base, sempre
    - Facts são lidos apenas do predecessor direto, da execução atual
    - Nenhum input é mutado; nenhum estado é mantido entre chamadas

Limites explícitos:
    - Não adia nem reenfileira reconciliações (ver `predecessor_ready`,
      consultado pelo loop externo)
    - Não grava status
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from locality_dataflow.core.config.settings import AffinitySettings
from locality_dataflow.core.pipeline.context import RunContext
from locality_dataflow.core.pipeline.registry import OperationRegistry
from locality_dataflow.core.pipeline.types import (
    AffinityPolicy,
    AffinityStrategy,
    Operation,
    OperationPhase,
    OperationStatus,
)

from .composer import compose_affinity
from .strategy import RawStrategy, STEP_ID, normalize_policy, resolve_strategy
from .translator import translate


def _no_inheritance_reason(strategy: AffinityStrategy, facts: Dict[str, str]) -> str:
    if strategy.policy == AffinityPolicy.NONE:
        return "policy_none"
    if not facts:
        return "predecessor_without_facts"
    return "no_label_resolved"


def inherit_affinity(
    base_affinity: Optional[Dict[str, Any]],
    strategy: RawStrategy,
    predecessor_status: Optional[OperationStatus],
    *,
    settings: Optional[AffinitySettings] = None,
    ctx: Optional[RunContext] = None,
    step_id: str = STEP_ID,
) -> Optional[Dict[str, Any]]:
    """
    Calcula a afinidade composta de uma Operation dependente.

    Args:
        base_affinity: afinidade declarada pela própria Operation.
        strategy: estratégia crua declarada em runAfter.
        predecessor_status: snapshot do status do predecessor (None se ausente).
        settings: settings de afinidade.
        ctx: contexto opcional de observabilidade.
        step_id: chave usada nos eventos de log.

    Returns:
        Optional[Dict[str, Any]]: afinidade final para o pod template.
    """
    canonical = resolve_strategy(strategy, settings=settings, ctx=ctx, step_id=step_id)
    facts = predecessor_status.placement_facts() if predecessor_status is not None else {}

    fragment = translate(canonical, facts)
    composed = compose_affinity(base_affinity, fragment)

    if ctx is not None:
        if fragment is None:
            ctx.log(
                step_id=step_id,
                level="info",
                message="no inherited affinity",
                policy=canonical.policy.value,
                reason=_no_inheritance_reason(canonical, facts),
            )
        else:
            ctx.log(
                step_id=step_id,
                level="info",
                message="affinity inherited from predecessor",
                policy=canonical.policy.value,
                labels=fragment.labels,
                required=fragment.required_term is not None,
                preferred_terms=len(fragment.preferred_terms),
            )

    return composed


def affinity_for_operation(
    operation: Operation,
    registry: OperationRegistry,
    *,
    settings: Optional[AffinitySettings] = None,
    ctx: Optional[RunContext] = None,
) -> Optional[Dict[str, Any]]:
    """
    Afinidade final de `operation`, lendo o predecessor do registry.

    Sem runAfter declarado, a afinidade base é devolvida sem alteração.
    """
    ref = operation.spec.run_after
    if ref is None:
        return compose_affinity(operation.spec.affinity, None)

    predecessor = registry.predecessor_of(operation)
    return inherit_affinity(
        operation.spec.affinity,
        ref.affinity_strategy,
        predecessor.status if predecessor is not None else None,
        settings=settings,
        ctx=ctx,
        step_id=operation.key,
    )


def predecessor_ready(operation: Operation, registry: OperationRegistry) -> bool:
    """
    Indica se o pod template de `operation` já pode ser finalizado.

    Com política diferente de NONE, o predecessor precisa ter alcançado
    `Scheduled` (facts gravados ou sabidamente vazios). Predecessor ausente
    do registry não bloqueia: a herança degrada para "sem facts".
    """
    ref = operation.spec.run_after
    if ref is None:
        return True
    if normalize_policy(ref.affinity_strategy.policy) == AffinityPolicy.NONE:
        return True
    predecessor = registry.predecessor_of(operation)
    if predecessor is None:
        return True
    return predecessor.status.phase != OperationPhase.PENDING
