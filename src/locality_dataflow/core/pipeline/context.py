# src/locality_dataflow/core/pipeline/context.py
"""
Contexto de execução compartilhado da reconciliação.

Este módulo define o `RunContext`, a estrutura usada pelos componentes do
Locality DataFlow para registrar o que fizeram durante uma passada do
loop de reconciliação (externo) sobre as Operations.

O RunContext atua como o único meio de:
    - registro de logs estruturados (recorder, resolver, inheritance)
    - coleta de warnings não fatais por Operation

Invariantes:
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id` (a chave da Operation)
    - Nenhum componente depende do contexto para calcular resultados;
      ele é sempre opcional e apenas observa

Limites explícitos:
    - Não persiste dados automaticamente
    - Não armazena status de Operations (ver `OperationRegistry`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List
from datetime import timezone


@dataclass
class RunContext:
    """
    Contexto de observabilidade de uma passada de reconciliação.

    Campos:
        - run_id: identificador da passada (não confundir com o run_id de uma Operation)
        - created_at: timestamp UTC de criação
        - config: configuração resolvida
        - meta: metadados livres (ex.: controller, namespace observado)
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [ev for ev in self.events if ev.get("step_id") == step_id]
