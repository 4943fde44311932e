# src/locality_dataflow/core/pipeline/types.py
"""
Tipos canônicos de Operation do Locality DataFlow.

Este módulo define as estruturas que descrevem uma Operation (um passo do
pipeline de dados) e as declarações de herança de afinidade entre ela e
seu predecessor.

Componentes principais:
    - OperationPhase   → máquina de estados de uma execução
    - AffinityPolicy   → políticas de herança (None, Require, Prefer)
    - PreferredLabel   → par (label, peso) de preferência
    - AffinityStrategy → declaração crua ou canônica da herança
    - PredecessorRef   → ponteiro runAfter + estratégia
    - OperationSpec    → estado desejado
    - OperationStatus  → estado observado (inclui placement facts)
    - Operation        → spec + status

Princípios fundamentais:
    - Tipos são imutáveis (frozen) e serializáveis
    - O shape persistido usa as chaves camelCase do recurso
    - Nenhuma lógica de herança vive neste módulo

Invariantes:
    - `from_dict` é tolerante: valores desconhecidos são preservados crus
      e tratados pelo resolver, nunca rejeitados aqui
    - `to_dict` omite campos opcionais ausentes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class OperationPhase(str, Enum):
    """
    Fases de uma execução (run) de Operation.

    Transições válidas:
        Pending → Scheduled → Running → {Succeeded, Failed}
        Scheduled → Failed

    Placement facts existem apenas a partir de `Scheduled`. Leitores que
    encontram uma Operation em `Pending` tratam os facts como ausentes.
    """
    PENDING = "Pending"
    SCHEDULED = "Scheduled"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class AffinityPolicy(str, Enum):
    """
    Política de herança de afinidade do predecessor.

    - NONE: sem herança (comportamento idêntico ao de um sistema sem a feature)
    - REQUIRE: termos obrigatórios (AND entre os labels resolvidos)
    - PREFER: termos preferenciais independentes e ponderados
    """
    NONE = ""
    REQUIRE = "Require"
    PREFER = "Prefer"


@dataclass(frozen=True)
class PreferredLabel:
    """Label de preferência e seu peso (1..100 depois de resolvido)."""

    name: Any
    weight: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "PreferredLabel":
        if isinstance(data, PreferredLabel):
            return data
        if isinstance(data, dict):
            return cls(name=data.get("name"), weight=data.get("weight"))
        # entrada malformada: preservada para o resolver descartar com warning
        return cls(name=data, weight=None)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.weight is not None:
            out["weight"] = self.weight
        return out


@dataclass(frozen=True)
class AffinityStrategy:
    """
    Estratégia de herança `{policy, require, prefer}`.

    Uma instância pode estar em forma **crua** (como declarada pelo usuário,
    com `policy` possivelmente desconhecida e listas vazias) ou **canônica**
    (saída de `resolve_strategy`). Os defaults nunca são gravados de volta
    no spec; eles existem apenas na forma canônica.
    """

    policy: Any = AffinityPolicy.NONE
    require: Tuple[Any, ...] = ()
    prefer: Tuple[PreferredLabel, ...] = ()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AffinityStrategy":
        data = data or {}
        require = data.get("require") or ()
        prefer = data.get("prefer") or ()
        if not isinstance(require, (list, tuple)):
            require = (require,)
        if not isinstance(prefer, (list, tuple)):
            prefer = (prefer,)
        return cls(
            policy=data.get("policy", AffinityPolicy.NONE),
            require=tuple(require),
            prefer=tuple(PreferredLabel.from_dict(p) for p in prefer),
        )

    def to_dict(self) -> Dict[str, Any]:
        policy = self.policy.value if isinstance(self.policy, AffinityPolicy) else self.policy
        out: Dict[str, Any] = {"policy": policy}
        if self.require:
            out["require"] = list(self.require)
        if self.prefer:
            out["prefer"] = [p.to_dict() for p in self.prefer]
        return out


@dataclass(frozen=True)
class PredecessorRef:
    """Referência runAfter: a Operation após a qual esta executa."""

    name: str
    namespace: Optional[str] = None
    affinity_strategy: AffinityStrategy = field(default_factory=AffinityStrategy)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PredecessorRef":
        return cls(
            name=data["name"],
            namespace=data.get("namespace"),
            affinity_strategy=AffinityStrategy.from_dict(data.get("affinityStrategy")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name}
        if self.namespace is not None:
            out["namespace"] = self.namespace
        out["affinityStrategy"] = self.affinity_strategy.to_dict()
        return out


@dataclass(frozen=True)
class OperationSpec:
    """
    Estado desejado de uma Operation.

    Campos:
        - parallelism: número de pods da execução (> 1 → multi-pod)
        - run_after: predecessor opcional
        - affinity: afinidade base declarada pelo usuário (shape nativo do pod spec)
    """

    parallelism: int = 1
    run_after: Optional[PredecessorRef] = None
    affinity: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OperationSpec":
        data = data or {}
        run_after = data.get("runAfter")
        return cls(
            parallelism=int(data.get("parallelism", 1) or 1),
            run_after=PredecessorRef.from_dict(run_after) if run_after else None,
            affinity=data.get("affinity"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"parallelism": self.parallelism}
        if self.run_after is not None:
            out["runAfter"] = self.run_after.to_dict()
        if self.affinity is not None:
            out["affinity"] = self.affinity
        return out


@dataclass(frozen=True)
class OperationStatus:
    """
    Estado observado de uma execução de Operation.

    `node_affinity_labels` são os placement facts: label → valor do Node
    onde o pod único da execução foi alocado. `None` significa "ainda não
    registrado" ou "multi-pod".
    """

    phase: OperationPhase = OperationPhase.PENDING
    run_id: Optional[str] = None
    node_name: Optional[str] = None
    node_affinity_labels: Optional[Dict[str, str]] = None

    def placement_facts(self) -> Dict[str, str]:
        """Snapshot dos facts da execução atual (vazio antes de `Scheduled`)."""
        if self.phase == OperationPhase.PENDING or not self.node_affinity_labels:
            return {}
        return dict(self.node_affinity_labels)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "OperationStatus":
        data = data or {}
        labels = data.get("nodeAffinityLabels")
        try:
            phase = OperationPhase(data.get("phase") or OperationPhase.PENDING.value)
        except ValueError:
            # fase desconhecida: facts tratados como ausentes
            phase = OperationPhase.PENDING
        return cls(
            phase=phase,
            run_id=data.get("runId"),
            node_name=data.get("nodeName"),
            node_affinity_labels=dict(labels) if labels is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"phase": self.phase.value}
        if self.run_id is not None:
            out["runId"] = self.run_id
        if self.node_name is not None:
            out["nodeName"] = self.node_name
        if self.node_affinity_labels is not None:
            out["nodeAffinityLabels"] = dict(self.node_affinity_labels)
        return out


@dataclass(frozen=True)
class Operation:
    """Um passo do pipeline: identidade, spec e status."""

    name: str
    namespace: str = "default"
    spec: OperationSpec = field(default_factory=OperationSpec)
    status: OperationStatus = field(default_factory=OperationStatus)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def is_multi_pod(self) -> bool:
        return self.spec.parallelism > 1

    @property
    def predecessor_key(self) -> Optional[str]:
        ref = self.spec.run_after
        if ref is None:
            return None
        return f"{ref.namespace or self.namespace}/{ref.name}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Operation":
        meta = data.get("metadata") or {}
        return cls(
            name=meta["name"],
            namespace=meta.get("namespace") or "default",
            spec=OperationSpec.from_dict(data.get("spec")),
            status=OperationStatus.from_dict(data.get("status")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }
