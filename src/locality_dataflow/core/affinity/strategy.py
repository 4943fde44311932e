# src/locality_dataflow/core/affinity/strategy.py
"""
Resolução canônica da estratégia de herança (AffinityStrategyResolver).

Recebe uma `AffinityStrategy` crua (possivelmente parcial, com política
desconhecida ou listas vazias) e devolve sua forma canônica, com defaults
aplicados.

Regras (v1):
    - policy: None/"" → NONE; "Require"/"Prefer" → enum; qualquer outro
      valor → NONE com warning (nunca erro)
    - require: strings aparadas, entradas vazias/não-string descartadas,
      duplicatas removidas (primeira ocorrência vence);
      lista ausente ou vazia → [hostname]
    - prefer: nomes inválidos descartados; pesos não inteiros ou não
      positivos descartados (ou fixados em 1 com `invalid_weight: clamp`);
      pesos acima de 100 fixados em 100; duplicatas removidas antes de
      avaliar o peso; lista ausente ou vazia → [(hostname, default_prefer_weight)]
    - lista declarada que perde todas as entradas na limpeza → NONE com
      warning; o default nunca substitui entradas escritas pelo usuário
    - a forma canônica mantém apenas a lista da política ativa

Invariantes:
    - `resolve_strategy(resolve_strategy(x)) == resolve_strategy(x)`
    - O input nunca é mutado e os defaults nunca voltam para o spec
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple, Union

from locality_dataflow.core.config.settings import AffinitySettings, INVALID_WEIGHT_CLAMP
from locality_dataflow.core.errors import (
    LocalityErrorPayload,
    affinity_label_invalid,
    affinity_policy_unrecognized,
    affinity_strategy_exhausted,
    affinity_weight_invalid,
)
from locality_dataflow.core.pipeline.context import RunContext
from locality_dataflow.core.pipeline.types import AffinityPolicy, AffinityStrategy, PreferredLabel

from .labels import MAX_PREFER_WEIGHT, MIN_PREFER_WEIGHT


RawStrategy = Union[AffinityStrategy, Dict[str, Any], None]

STEP_ID = "affinity.strategy"


def _warn(ctx: Optional[RunContext], step_id: str, payload: LocalityErrorPayload) -> None:
    if ctx is None:
        return
    ctx.log(step_id=step_id, level="warning", message=payload.message, error=payload.to_dict())
    ctx.add_warning(step_id=step_id, message=f"{payload.type}: {payload.message}")


def normalize_policy(
    policy: Any,
    *,
    ctx: Optional[RunContext] = None,
    step_id: str = STEP_ID,
) -> AffinityPolicy:
    if policy is None or policy == "":
        return AffinityPolicy.NONE
    if isinstance(policy, AffinityPolicy):
        return policy
    if isinstance(policy, str):
        for member in AffinityPolicy:
            if policy == member.value:
                return member
    _warn(ctx, step_id, affinity_policy_unrecognized(policy=policy, operation=step_id))
    return AffinityPolicy.NONE


def _clean_name(name: Any) -> Optional[str]:
    if not isinstance(name, str):
        return None
    name = name.strip()
    return name or None


def _resolve_require(
    entries: Tuple[Any, ...],
    ctx: Optional[RunContext],
    step_id: str,
) -> Tuple[str, ...]:
    names: List[str] = []
    for entry in entries:
        name = _clean_name(entry)
        if name is None:
            _warn(ctx, step_id, affinity_label_invalid(entry=entry, section="require", operation=step_id))
            continue
        if name not in names:
            names.append(name)
    return tuple(names)


def _resolve_weight(
    name: str,
    weight: Any,
    settings: AffinitySettings,
    ctx: Optional[RunContext],
    step_id: str,
) -> Optional[int]:
    if weight is None:
        return settings.default_prefer_weight

    valid_type = isinstance(weight, int) and not isinstance(weight, bool)
    if valid_type and weight > MAX_PREFER_WEIGHT:
        _warn(ctx, step_id, affinity_weight_invalid(
            label=name, weight=weight, action="clamped", operation=step_id
        ))
        return MAX_PREFER_WEIGHT
    if valid_type and weight >= MIN_PREFER_WEIGHT:
        return weight

    if valid_type and settings.invalid_weight == INVALID_WEIGHT_CLAMP:
        _warn(ctx, step_id, affinity_weight_invalid(
            label=name, weight=weight, action="clamped", operation=step_id
        ))
        return MIN_PREFER_WEIGHT

    _warn(ctx, step_id, affinity_weight_invalid(
        label=name, weight=weight, action="dropped", operation=step_id
    ))
    return None


def _resolve_prefer(
    entries: Tuple[Any, ...],
    settings: AffinitySettings,
    ctx: Optional[RunContext],
    step_id: str,
) -> Tuple[PreferredLabel, ...]:
    resolved: List[PreferredLabel] = []
    seen = set()
    for entry in entries:
        entry = PreferredLabel.from_dict(entry)
        name = _clean_name(entry.name)
        if name is None:
            _warn(ctx, step_id, affinity_label_invalid(entry=entry.name, section="prefer", operation=step_id))
            continue
        if name in seen:
            continue
        weight = _resolve_weight(name, entry.weight, settings, ctx, step_id)
        if weight is None:
            continue
        seen.add(name)
        resolved.append(PreferredLabel(name=name, weight=weight))
    return tuple(resolved)


def _exhausted(
    policy: AffinityPolicy,
    section: str,
    declared: int,
    ctx: Optional[RunContext],
    step_id: str,
) -> AffinityStrategy:
    _warn(ctx, step_id, affinity_strategy_exhausted(
        policy=policy.value, section=section, declared=declared, operation=step_id
    ))
    return AffinityStrategy()


def resolve_strategy(
    raw: RawStrategy,
    *,
    settings: Optional[AffinitySettings] = None,
    ctx: Optional[RunContext] = None,
    step_id: str = STEP_ID,
) -> AffinityStrategy:
    """
    Normaliza uma estratégia de herança para sua forma canônica.

    Args:
        raw: estratégia crua (`AffinityStrategy`, dict persistido ou None).
        settings: label hostname e política de pesos.
        ctx: contexto opcional para warnings de degradação.
        step_id: chave usada nos eventos de log (normalmente a Operation dependente).

    Returns:
        AffinityStrategy: estratégia canônica. Nunca levanta exceção por
        conteúdo malformado.
    """
    settings = settings or AffinitySettings()
    if raw is None:
        return AffinityStrategy()
    if isinstance(raw, dict):
        raw = AffinityStrategy.from_dict(raw)

    policy = normalize_policy(raw.policy, ctx=ctx, step_id=step_id)

    if policy == AffinityPolicy.REQUIRE:
        entries = tuple(raw.require or ())
        if not entries:
            return AffinityStrategy(policy=policy, require=(settings.hostname_label,))
        require = _resolve_require(entries, ctx, step_id)
        if require:
            return AffinityStrategy(policy=policy, require=require)
        return _exhausted(policy, "require", len(entries), ctx, step_id)

    if policy == AffinityPolicy.PREFER:
        entries = tuple(raw.prefer or ())
        if not entries:
            default = PreferredLabel(name=settings.hostname_label, weight=settings.default_prefer_weight)
            return AffinityStrategy(policy=policy, prefer=(default,))
        prefer = _resolve_prefer(entries, settings, ctx, step_id)
        if prefer:
            return AffinityStrategy(policy=policy, prefer=prefer)
        return _exhausted(policy, "prefer", len(entries), ctx, step_id)

    return AffinityStrategy()
