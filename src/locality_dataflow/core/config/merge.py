# src/locality_dataflow/core/config/merge.py
"""
Deep-merge das camadas de configuração de afinidade.

Camadas aplicadas em ordem: `DEFAULT_CONFIG` embutido, arquivo de
defaults, arquivo local. Cada camada declara apenas o que altera.

Política de merge (v1):
    - dict → merge recursivo por chave
    - None → mantém o valor da camada anterior (chave YAML sem valor,
      ex.: `zone:` deixado em branco num override)
    - list → sobrescrita total
    - escalar → sobrescrita direta, desde que o tipo coincida
    - conflito de tipos → `ConfigTypeConflictError` com o caminho pontuado
      da chave (ex.: `affinity.labels`)

Invariantes:
    - Nenhum input é mutado
    - `bool` e `int` são tipos distintos (`default_prefer_weight: true`
      é conflito, não peso 1)
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


def _dotted(path: Tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"


def _merge_at(base: Dict[str, Any], override: Dict[str, Any], path: Tuple[str, ...]) -> Dict[str, Any]:
    result: Dict[str, Any] = deepcopy(base)

    for key, value in override.items():
        key_path = path + (str(key),)
        if value is None:
            result.setdefault(key, None)
            continue
        if key not in result or result[key] is None:
            result[key] = deepcopy(value)
            continue

        current = result[key]
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = _merge_at(current, value, key_path)
        elif isinstance(value, list) or type(current) is type(value):
            result[key] = deepcopy(value)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{_dotted(key_path)}': "
                f"{type(current).__name__} vs {type(value).__name__}"
            )

    return result


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e devolve uma nova configuração.

    Raises:
        ConfigTypeConflictError: Se os tipos divergirem em alguma chave
            (ou se algum dos lados não for dict).
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return _merge_at(base, override, ())
