# src/locality_dataflow/core/affinity/translator.py
"""
Tradução de (estratégia canônica, placement facts) em fragmentos de nodeAffinity.

Este é o coração da herança de afinidade (ConstraintTranslator).

Política de tradução (v1):
    - NONE, ou facts vazios (predecessor multi-pod ou ainda não alocado)
      → nenhum fragmento
    - REQUIRE: cada label de `require` é procurado nos facts; labels sem
      valor são descartados. Os pares resolvidos formam UM único node
      selector term (AND: todos precisam valer no mesmo Node). Nenhum
      resolvido → nenhum fragmento.
    - PREFER: cada `(label, peso)` resolvido vira um termo preferred
      independente (pontuações somadas pelo scheduler, sem AND/OR entre
      eles). Nenhum resolvido → nenhum fragmento.

Invariantes:
    - Função pura: mesma entrada, mesma saída; inputs nunca mutados
    - Nunca emite termo vazio (vacuamente verdadeiro)
    - Nunca levanta exceção por dados ausentes

Formato dos fragmentos (shape nativo do pod spec):

    required_term:
        {"matchExpressions": [{"key": k, "operator": "In", "values": [v]}, ...]}

    preferred_terms[i]:
        {"weight": w, "preference": {"matchExpressions": [{"key": k, "operator": "In", "values": [v]}]}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from locality_dataflow.core.pipeline.types import AffinityPolicy, AffinityStrategy


@dataclass(frozen=True)
class AffinityFragment:
    """
    Restrições herdadas do predecessor, prontas para composição.

    Campos:
        - required_term: node selector term obrigatório (AND) ou None
        - preferred_terms: termos preferred independentes, na ordem declarada
    """

    required_term: Optional[Dict[str, Any]] = None
    preferred_terms: Tuple[Dict[str, Any], ...] = ()

    @property
    def required_expressions(self) -> List[Dict[str, Any]]:
        if self.required_term is None:
            return []
        return list(self.required_term.get("matchExpressions") or [])

    @property
    def labels(self) -> List[str]:
        keys = [e["key"] for e in self.required_expressions]
        for term in self.preferred_terms:
            keys.extend(e["key"] for e in term["preference"]["matchExpressions"])
        return keys


def match_expression(key: str, value: str) -> Dict[str, Any]:
    return {"key": key, "operator": "In", "values": [value]}


def _lookup(facts: Mapping[str, str], name: str) -> Optional[str]:
    value = facts.get(name)
    if isinstance(value, str) and value:
        return value
    return None


def _translate_require(strategy: AffinityStrategy, facts: Mapping[str, str]) -> Optional[AffinityFragment]:
    expressions = []
    for name in strategy.require:
        value = _lookup(facts, name)
        if value is not None:
            expressions.append(match_expression(name, value))
    if not expressions:
        return None
    return AffinityFragment(required_term={"matchExpressions": expressions})


def _translate_prefer(strategy: AffinityStrategy, facts: Mapping[str, str]) -> Optional[AffinityFragment]:
    terms = []
    for entry in strategy.prefer:
        value = _lookup(facts, entry.name)
        if value is None:
            continue
        terms.append({
            "weight": entry.weight,
            "preference": {"matchExpressions": [match_expression(entry.name, value)]},
        })
    if not terms:
        return None
    return AffinityFragment(preferred_terms=tuple(terms))


def translate(strategy: AffinityStrategy, facts: Optional[Mapping[str, str]]) -> Optional[AffinityFragment]:
    """
    Converte uma estratégia canônica e os facts do predecessor em um fragmento.

    Args:
        strategy: estratégia já resolvida por `resolve_strategy`.
        facts: placement facts do predecessor (None/vazio → sem herança).

    Returns:
        Optional[AffinityFragment]: fragmento herdado, ou None.
    """
    if not facts:
        return None
    if strategy.policy == AffinityPolicy.REQUIRE:
        return _translate_require(strategy, facts)
    if strategy.policy == AffinityPolicy.PREFER:
        return _translate_prefer(strategy, facts)
    return None
