# src/locality_dataflow/core/config/loader.py
"""
Loader da configuração de afinidade do Locality DataFlow.

A configuração efetiva é composta por duas camadas em disco:
    - defaults do deployment (obrigatório)
    - overrides locais do operador (opcional; ausente no disco → ignorado)

Os dois formatos aceitos (`.yaml`/`.yml` e `.json`) são lidos pelo mesmo
parser PyYAML: JSON é sintaxe de fluxo válida em YAML, então um único
caminho de leitura basta.

Invariantes:
    - O resultado é sempre um `dict`
    - Arquivo vazio equivale a `{}`
    - Os erros indicam a camada (defaults/local) e o caminho do arquivo

Limites explícitos:
    - Não interpreta a seção `affinity` (ver `settings.py`)
"""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)


SUPPORTED_SUFFIXES = frozenset({".yaml", ".yml", ".json"})


def _read_layer(path: Path, layer: str) -> Dict[str, Any]:
    """
    Lê uma camada de configuração.

    Raises:
        UnsupportedConfigFormatError: Sufixo fora de `SUPPORTED_SUFFIXES`.
        InvalidConfigRootTypeError: Raiz do documento não é um mapeamento.
    """
    if path.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado na camada {layer}: {path.suffix} ({path})"
        )

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root da camada {layer} deve ser dict, recebido: "
            f"{type(data).__name__} ({path})"
        )
    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Args:
        defaults_path (str): Caminho da camada de defaults.
        local_path (Optional[str]): Caminho opcional da camada local.

    Returns:
        Dict[str, Any]: Configuração resolvida (local sobre defaults).

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato de alguma camada não for suportado.
        InvalidConfigRootTypeError: Se alguma camada não for um mapeamento.
        ConfigTypeConflictError: Se a camada local divergir em tipo dos defaults.
    """
    defaults_file = Path(defaults_path)
    if not defaults_file.is_file():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")

    effective = _read_layer(defaults_file, "defaults")

    if local_path is not None and Path(local_path).is_file():
        effective = deep_merge(effective, _read_layer(Path(local_path), "local"))

    return effective
