# src/locality_dataflow/core/config/settings.py
"""
Settings tipadas da herança de afinidade.

Este módulo converte a seção `affinity` da configuração resolvida em um
objeto imutável (`AffinitySettings`) consumido pelo recorder e pelo
resolver de estratégia.

Formato esperado:

    affinity:
      labels:
        hostname: kubernetes.io/hostname
        zone: topology.kubernetes.io/zone
        region: topology.kubernetes.io/region
      default_prefer_weight: 100
      invalid_weight: drop        # drop | clamp

Invariantes:
    - Chaves ausentes assumem os valores de `DEFAULT_CONFIG`
    - Valores inválidos são rejeitados aqui, nunca durante a herança
    - A mesma configuração sempre produz as mesmas settings
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from locality_dataflow.core.affinity.labels import (
    DEFAULT_PREFER_WEIGHT,
    HOSTNAME_LABEL,
    MAX_PREFER_WEIGHT,
    MIN_PREFER_WEIGHT,
    REGION_LABEL,
    ZONE_LABEL,
)

from .errors import InvalidAffinitySettingsError
from .loader import load_config
from .merge import deep_merge


INVALID_WEIGHT_DROP = "drop"
INVALID_WEIGHT_CLAMP = "clamp"

DEFAULT_CONFIG: Dict[str, Any] = {
    "affinity": {
        "labels": {
            "hostname": HOSTNAME_LABEL,
            "zone": ZONE_LABEL,
            "region": REGION_LABEL,
        },
        "default_prefer_weight": DEFAULT_PREFER_WEIGHT,
        "invalid_weight": INVALID_WEIGHT_DROP,
    }
}


def _label(labels: Dict[str, Any], name: str) -> str:
    value = labels.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidAffinitySettingsError(
            f"affinity.labels.{name} must be a non-empty string"
        )
    return value.strip()


@dataclass(frozen=True)
class AffinitySettings:
    """
    Settings imutáveis da herança de afinidade.

    Campos:
        - hostname_label: label identificador do host (default da estratégia)
        - zone_label / region_label: labels de topologia capturados pelo recorder
        - default_prefer_weight: peso do termo preferred default (1..100)
        - invalid_weight: política para pesos não positivos (`drop` | `clamp`)
    """

    hostname_label: str = HOSTNAME_LABEL
    zone_label: str = ZONE_LABEL
    region_label: str = REGION_LABEL
    default_prefer_weight: int = DEFAULT_PREFER_WEIGHT
    invalid_weight: str = INVALID_WEIGHT_DROP

    @property
    def topology_labels(self) -> Tuple[str, str, str]:
        return (self.hostname_label, self.zone_label, self.region_label)

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "AffinitySettings":
        """
        Constrói settings a partir de uma configuração resolvida.

        Apenas a seção `affinity` é considerada; demais chaves são ignoradas.

        Raises:
            InvalidAffinitySettingsError: Se algum valor da seção for inválido.
            ConfigTypeConflictError: Se a seção tiver shape incompatível.
        """
        section = (config or {}).get("affinity") or {}
        merged = deep_merge(DEFAULT_CONFIG, {"affinity": section})["affinity"]

        labels = merged.get("labels") or {}
        weight = merged.get("default_prefer_weight")
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise InvalidAffinitySettingsError(
                "affinity.default_prefer_weight must be an integer"
            )
        if not MIN_PREFER_WEIGHT <= weight <= MAX_PREFER_WEIGHT:
            raise InvalidAffinitySettingsError(
                f"affinity.default_prefer_weight must be within "
                f"{MIN_PREFER_WEIGHT}..{MAX_PREFER_WEIGHT}, got {weight}"
            )

        invalid_weight = merged.get("invalid_weight")
        if invalid_weight not in (INVALID_WEIGHT_DROP, INVALID_WEIGHT_CLAMP):
            raise InvalidAffinitySettingsError(
                "affinity.invalid_weight must be 'drop' or 'clamp'"
            )

        return cls(
            hostname_label=_label(labels, "hostname"),
            zone_label=_label(labels, "zone"),
            region_label=_label(labels, "region"),
            default_prefer_weight=weight,
            invalid_weight=invalid_weight,
        )


def load_settings(*, defaults_path: str, local_path: Optional[str] = None) -> AffinitySettings:
    """Carrega a configuração do disco e devolve as settings de afinidade."""
    return AffinitySettings.from_config(
        load_config(defaults_path=defaults_path, local_path=local_path)
    )
