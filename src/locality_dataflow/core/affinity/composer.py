# src/locality_dataflow/core/affinity/composer.py
"""
Composição da afinidade final (AffinityComposer).

Combina a afinidade base declarada pela Operation com o fragmento herdado
do predecessor, produzindo o objeto `affinity` entregue ao gerador de pod
template.

Política de composição (v1):
    - fragmento None → cópia idêntica da base (inclusive None)
    - required: o Kubernetes avalia `nodeSelectorTerms` com OR e as
      `matchExpressions` de um termo com AND. As expressões herdadas são
      anexadas ao final de CADA termo base, de modo que a exigência herdada
      vale qualquer que seja o termo satisfeito. Sem termos base, o termo
      herdado é o único termo.
    - preferred: termos herdados anexados após os termos base
    - podAffinity, podAntiAffinity e demais chaves: preservados

Invariantes:
    - Nenhuma expressão ou termo da base é descartado ou reordenado
    - Inputs nunca são mutados (o resultado é sempre uma cópia profunda)
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, Optional

from .labels import PREFERRED_KEY, REQUIRED_KEY
from .translator import AffinityFragment


def _compose_required(node_affinity: Dict[str, Any], fragment: AffinityFragment) -> None:
    inherited = fragment.required_expressions
    if not inherited:
        return

    required = node_affinity.get(REQUIRED_KEY)
    if not isinstance(required, dict):
        required = {}
        node_affinity[REQUIRED_KEY] = required

    terms = required.get("nodeSelectorTerms") or []
    if not terms:
        required["nodeSelectorTerms"] = [{"matchExpressions": deepcopy(inherited)}]
        return

    for term in terms:
        # termos malformados seguem intactos
        if not isinstance(term, dict):
            continue
        expressions = term.get("matchExpressions") or []
        term["matchExpressions"] = expressions + deepcopy(inherited)
    required["nodeSelectorTerms"] = terms


def _compose_preferred(node_affinity: Dict[str, Any], fragment: AffinityFragment) -> None:
    if not fragment.preferred_terms:
        return
    preferred = node_affinity.get(PREFERRED_KEY) or []
    node_affinity[PREFERRED_KEY] = list(preferred) + deepcopy(list(fragment.preferred_terms))


def compose_affinity(
    base: Optional[Dict[str, Any]],
    fragment: Optional[AffinityFragment],
) -> Optional[Dict[str, Any]]:
    """
    Anexa o fragmento herdado à afinidade base.

    Args:
        base: afinidade declarada pela Operation (shape nativo) ou None.
        fragment: saída de `translate` ou None.

    Returns:
        Optional[Dict[str, Any]]: afinidade final; igual à base quando não há fragmento.
    """
    result = deepcopy(base)
    if fragment is None:
        return result

    if result is None:
        result = {}
    node_affinity = result.get("nodeAffinity")
    if not isinstance(node_affinity, dict):
        node_affinity = {}
        result["nodeAffinity"] = node_affinity

    _compose_required(node_affinity, fragment)
    _compose_preferred(node_affinity, fragment)
    return result
