# src/locality_dataflow/core/affinity/recorder.py
"""
Registro de placement facts (NodeMetadataRecorder).

Quando o pod único de uma Operation é vinculado a um Node, este módulo
captura os labels relevantes do Node e os grava no status da execução,
na transição para `Scheduled`.

Facts capturados (união):
    1. labels de topologia do Node: hostname, zone e region
    2. para cada chave de label referenciada pelo nodeAffinity declarado da
       própria Operation (termos required e preferred), o valor do Node

Regras:
    - Labels ausentes no Node são omitidos, nunca gravados como ""
    - Operations multi-pod não têm facts: a coleta é pulada e o status
      fica com `node_affinity_labels = None` durante toda a execução
    - Gravação única por execução: um segundo registro com o mesmo run_id
      não altera nada
    - Uma execução nova (run_id diferente) substitui o mapa inteiro

Limites explícitos:
    - Não consulta a API do cluster; o objeto Node é fornecido pelo chamador
    - Não persiste o status (responsabilidade do loop de reconciliação)
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from locality_dataflow.core.config.settings import AffinitySettings
from locality_dataflow.core.pipeline.context import RunContext
from locality_dataflow.core.pipeline.types import Operation, OperationPhase, OperationStatus

from .labels import PREFERRED_KEY, REQUIRED_KEY


def _node_labels(node: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not isinstance(node, dict):
        return {}
    labels = (node.get("metadata") or {}).get("labels")
    return labels if isinstance(labels, dict) else {}


def _node_name(node: Optional[Dict[str, Any]]) -> Optional[str]:
    if not isinstance(node, dict):
        return None
    return (node.get("metadata") or {}).get("name")


def _expression_keys(expressions: Any) -> Iterable[str]:
    for expr in expressions or []:
        if isinstance(expr, dict) and isinstance(expr.get("key"), str):
            yield expr["key"]


def declared_label_keys(affinity: Optional[Dict[str, Any]]) -> List[str]:
    """
    Chaves de label referenciadas pelo nodeAffinity declarado, em ordem de aparição.

    `matchFields` é ignorado: refere-se a campos do Node, não a labels.
    """
    node_affinity = (affinity or {}).get("nodeAffinity") or {}
    keys: List[str] = []

    required = node_affinity.get(REQUIRED_KEY) or {}
    for term in required.get("nodeSelectorTerms") or []:
        keys.extend(_expression_keys((term or {}).get("matchExpressions")))

    for pref in node_affinity.get(PREFERRED_KEY) or []:
        preference = (pref or {}).get("preference") or {}
        keys.extend(_expression_keys(preference.get("matchExpressions")))

    return list(dict.fromkeys(keys))


def collect_placement_facts(
    node: Optional[Dict[str, Any]],
    declared_affinity: Optional[Dict[str, Any]] = None,
    settings: Optional[AffinitySettings] = None,
) -> Dict[str, str]:
    """
    Calcula os placement facts de um Node para uma Operation.

    Args:
        node: objeto Node no shape da API (`metadata.name`, `metadata.labels`).
        declared_affinity: afinidade base declarada pela Operation.
        settings: labels de topologia a capturar.

    Returns:
        Dict[str, str]: label → valor, apenas para labels presentes no Node.
    """
    settings = settings or AffinitySettings()
    labels = _node_labels(node)

    facts: Dict[str, str] = {}
    for key in list(settings.topology_labels) + declared_label_keys(declared_affinity):
        value = labels.get(key)
        if isinstance(value, str) and value:
            facts[key] = value
    return facts


def record_placement(
    operation: Operation,
    *,
    node: Optional[Dict[str, Any]],
    run_id: str,
    settings: Optional[AffinitySettings] = None,
    ctx: Optional[RunContext] = None,
) -> Operation:
    """
    Registra a transição para `Scheduled` e os placement facts da execução.

    Returns:
        Operation: nova instância com status atualizado, ou a mesma
        instância quando a execução `run_id` já foi registrada.
    """
    status = operation.status
    if status.run_id == run_id and status.phase != OperationPhase.PENDING:
        return operation

    if operation.is_multi_pod:
        new_status = OperationStatus(
            phase=OperationPhase.SCHEDULED,
            run_id=run_id,
            node_name=None,
            node_affinity_labels=None,
        )
        if ctx is not None:
            ctx.log(
                step_id=operation.key,
                level="info",
                message="placement facts skipped for multi-pod operation",
                operation_run_id=run_id,
                parallelism=operation.spec.parallelism,
            )
        return replace(operation, status=new_status)

    facts = collect_placement_facts(node, operation.spec.affinity, settings)
    new_status = OperationStatus(
        phase=OperationPhase.SCHEDULED,
        run_id=run_id,
        node_name=_node_name(node),
        node_affinity_labels=facts,
    )

    if ctx is not None:
        ctx.log(
            step_id=operation.key,
            level="info",
            message="placement facts recorded",
            operation_run_id=run_id,
            node_name=new_status.node_name,
            labels=sorted(facts),
            replaced_run_id=status.run_id if status.run_id != run_id else None,
        )

    return replace(operation, status=new_status)
