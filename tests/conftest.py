# tests/conftest.py
"""
Fixtures compartilhados para testes do Locality DataFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- objetos Node no shape da API do cluster
- uma fábrica de Operations para cadeias runAfter

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Nenhuma fixture realiza I/O ou acessa um cluster real
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Limites explícitos:
    - Não substituir testes de integração com um scheduler real
"""

import pytest
from datetime import datetime, timezone


HOST = "kubernetes.io/hostname"
ZONE = "topology.kubernetes.io/zone"
REGION = "topology.kubernetes.io/region"


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Returns:
        str: Conteúdo YAML representando configuração padrão (defaults).
    """
    return """\
affinity:
  labels:
    hostname: kubernetes.io/hostname
    zone: topology.kubernetes.io/zone
    region: topology.kubernetes.io/region
  default_prefer_weight: 100
  invalid_weight: drop
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de configuração local (override) semelhante ao uso real do projeto.

    Sobrescreve apenas o peso default e a política de pesos inválidos.
    """
    return """\
affinity:
  default_prefer_weight: 80
  invalid_weight: clamp
"""


@pytest.fixture
def dummy_config() -> dict:
    return {"affinity": {"default_prefer_weight": 100, "invalid_weight": "drop"}}


@pytest.fixture
def settings():
    from locality_dataflow.core.config.settings import AffinitySettings

    return AffinitySettings()


# =====================================================
# RunContext
# =====================================================

@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    Invariantes:
        - `run_id` e `created_at` são fixos
        - O contexto inicia sem eventos nem warnings
    """
    from locality_dataflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="reconcile-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


# =====================================================
# Cluster objects
# =====================================================

@pytest.fixture
def make_node():
    """Fábrica de objetos Node (`metadata.name` + `metadata.labels`)."""

    def _make(name: str = "node-1", **labels: str) -> dict:
        return {"metadata": {"name": name, "labels": dict(labels)}}

    return _make


@pytest.fixture
def full_node(make_node) -> dict:
    return make_node(
        "node-1",
        **{
            HOST: "node-1",
            ZONE: "z1",
            REGION: "r1",
            "disktype": "ssd",
            "gpu": "a100",
        },
    )


# =====================================================
# Operations
# =====================================================

@pytest.fixture
def make_operation():
    """
    Fábrica de Operations.

    Args aceitos pela fábrica:
        name, parallelism, run_after (nome do predecessor),
        strategy (dict persistido), affinity (afinidade base), status.
    """
    from locality_dataflow.core.pipeline.types import (
        AffinityStrategy,
        Operation,
        OperationSpec,
        OperationStatus,
        PredecessorRef,
    )

    def _make(
        name: str,
        *,
        parallelism: int = 1,
        run_after: str = None,
        strategy: dict = None,
        affinity: dict = None,
        status: OperationStatus = None,
    ) -> Operation:
        ref = None
        if run_after is not None:
            ref = PredecessorRef(
                name=run_after,
                affinity_strategy=AffinityStrategy.from_dict(strategy),
            )
        return Operation(
            name=name,
            spec=OperationSpec(parallelism=parallelism, run_after=ref, affinity=affinity),
            status=status or OperationStatus(),
        )

    return _make


@pytest.fixture
def scheduled_status():
    """Fábrica de status `Scheduled` com facts explícitos."""
    from locality_dataflow.core.pipeline.types import OperationPhase, OperationStatus

    def _make(facts, *, run_id: str = "run-1", node_name: str = "node-1"):
        return OperationStatus(
            phase=OperationPhase.SCHEDULED,
            run_id=run_id,
            node_name=node_name,
            node_affinity_labels=facts,
        )

    return _make


@pytest.fixture
def base_affinity() -> dict:
    """Afinidade base do usuário com um termo obrigatório não relacionado."""
    return {
        "nodeAffinity": {
            "requiredDuringSchedulingIgnoredDuringExecution": {
                "nodeSelectorTerms": [
                    {"matchExpressions": [{"key": "disktype", "operator": "In", "values": ["ssd"]}]}
                ]
            }
        }
    }
