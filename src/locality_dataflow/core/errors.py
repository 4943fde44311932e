"""
Locality DataFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Locality DataFlow.

Dois usos distintos:
    - Degradações da herança de afinidade (política desconhecida, peso
      inválido, label malformado) viram payloads de **warning**, registrados
      no RunContext. Elas nunca bloqueiam a Operation.
    - Falhas estruturais dos colaboradores (registry, ciclo de vida) viram
      payloads de erro associados às exceções tipadas de `exceptions.py`.

Payloads devem ser explícitos, serializáveis e acionáveis.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LocalityErrorPayload:
    """
    Payload canônico de erro/aviso do Locality DataFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - fatal: indica se a condição interrompe o fluxo (False para degradações)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    fatal: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Estratégia de afinidade (degradações, nunca fatais)
AFFINITY_POLICY_UNRECOGNIZED = "AFFINITY_POLICY_UNRECOGNIZED"
AFFINITY_WEIGHT_INVALID = "AFFINITY_WEIGHT_INVALID"
AFFINITY_LABEL_INVALID = "AFFINITY_LABEL_INVALID"
AFFINITY_STRATEGY_EXHAUSTED = "AFFINITY_STRATEGY_EXHAUSTED"

# Registry / ciclo de vida
OPERATION_NOT_FOUND = "OPERATION_NOT_FOUND"
PREDECESSOR_CYCLE = "PREDECESSOR_CYCLE"
PHASE_TRANSITION_INVALID = "PHASE_TRANSITION_INVALID"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def affinity_policy_unrecognized(
    *,
    policy: Any,
    operation: Optional[str] = None,
    hint: str = "Use 'Require', 'Prefer' ou deixe a política vazia. A herança foi desabilitada para esta execução.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=AFFINITY_POLICY_UNRECOGNIZED,
        message="Política de afinidade desconhecida; tratada como None",
        details={
            "policy": repr(policy),
            "operation": operation,
            "allowed": ["", "Require", "Prefer"],
        },
        hint=hint,
        fatal=False,
    )


def affinity_weight_invalid(
    *,
    label: str,
    weight: Any,
    action: str,
    operation: Optional[str] = None,
    hint: str = "Declare pesos inteiros entre 1 e 100 em runAfter.affinityStrategy.prefer.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=AFFINITY_WEIGHT_INVALID,
        message="Peso de preferência inválido",
        details={
            "label": label,
            "weight": repr(weight),
            "action": action,
            "operation": operation,
        },
        hint=hint,
        fatal=False,
    )


def affinity_label_invalid(
    *,
    entry: Any,
    section: str,
    operation: Optional[str] = None,
    hint: str = "Nomes de label devem ser strings não vazias.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=AFFINITY_LABEL_INVALID,
        message="Entrada de label inválida descartada",
        details={
            "entry": repr(entry),
            "section": section,
            "operation": operation,
        },
        hint=hint,
        fatal=False,
    )


def affinity_strategy_exhausted(
    *,
    policy: str,
    section: str,
    declared: int,
    operation: Optional[str] = None,
    hint: str = "Corrija as entradas de runAfter.affinityStrategy; uma lista declarada nunca é trocada pelo default.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=AFFINITY_STRATEGY_EXHAUSTED,
        message="Nenhuma entrada válida na estratégia declarada; herança desabilitada",
        details={
            "policy": policy,
            "section": section,
            "declared": declared,
            "operation": operation,
        },
        hint=hint,
        fatal=False,
    )


def operation_not_found(
    *,
    key: str,
    hint: str = "Registre a Operation antes de atualizar seu status.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=OPERATION_NOT_FOUND,
        message="Operation não registrada",
        details={"key": key},
        hint=hint,
        fatal=True,
    )


def predecessor_cycle(
    *,
    chain: List[str],
    hint: str = "Ajuste runAfter para que a cadeia de predecessores termine em uma Operation sem predecessor.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=PREDECESSOR_CYCLE,
        message="Ciclo detectado na cadeia de predecessores",
        details={"chain": chain},
        hint=hint,
        fatal=True,
    )


def phase_transition_invalid(
    *,
    key: str,
    current: str,
    target: str,
    hint: str = "Use restart() para iniciar uma nova execução a partir de uma fase final.",
) -> LocalityErrorPayload:
    return LocalityErrorPayload(
        type=PHASE_TRANSITION_INVALID,
        message="Transição de fase não permitida",
        details={"key": key, "current": current, "target": target},
        hint=hint,
        fatal=True,
    )
