# tests/core/affinity/test_inheritance.py
"""
Testes ponta a ponta da herança de afinidade.

Os testes asseguram que:
- sem estratégia, a afinidade final é igual à base
- Require e Prefer produzem os termos esperados a partir dos facts
- labels ausentes no predecessor são ignorados sem erro
- predecessores multi-pod não transmitem localidade
- o cálculo é idempotente e preserva a afinidade do usuário
- o registry é usado como fonte do snapshot do predecessor

Limites explícitos:
    - Não valida o comportamento de um scheduler real
"""

from copy import deepcopy

from locality_dataflow.core.affinity.inheritance import (
    affinity_for_operation,
    inherit_affinity,
    predecessor_ready,
)
from locality_dataflow.core.affinity.recorder import record_placement
from locality_dataflow.core.pipeline.registry import OperationRegistry
from locality_dataflow.core.pipeline.types import AffinityStrategy, OperationPhase, OperationStatus

HOST = "kubernetes.io/hostname"
ZONE = "topology.kubernetes.io/zone"
REGION = "topology.kubernetes.io/region"

REQUIRED = "requiredDuringSchedulingIgnoredDuringExecution"
PREFERRED = "preferredDuringSchedulingIgnoredDuringExecution"

FACTS = {HOST: "n1", ZONE: "z1", REGION: "r1"}


def _expr(key, value):
    return {"key": key, "operator": "In", "values": [value]}


def test_default_off_equals_base(base_affinity, scheduled_status):
    out = inherit_affinity(base_affinity, None, scheduled_status(FACTS))

    assert out == base_affinity


def test_default_off_without_base(scheduled_status):
    assert inherit_affinity(None, AffinityStrategy(), scheduled_status(FACTS)) is None


def test_require_single_label(scheduled_status):
    out = inherit_affinity(None, {"policy": "Require", "require": [HOST]}, scheduled_status(FACTS))

    assert out == {
        "nodeAffinity": {REQUIRED: {"nodeSelectorTerms": [{"matchExpressions": [_expr(HOST, "n1")]}]}}
    }


def test_require_multi_label_single_term(scheduled_status):
    out = inherit_affinity(None, {"policy": "Require", "require": [ZONE, REGION]}, scheduled_status(FACTS))

    terms = out["nodeAffinity"][REQUIRED]["nodeSelectorTerms"]
    assert terms == [{"matchExpressions": [_expr(ZONE, "z1"), _expr(REGION, "r1")]}]


def test_partial_miss_keeps_resolved_labels(scheduled_status):
    out = inherit_affinity(
        None,
        {"policy": "Require", "require": [ZONE, "rack"]},
        scheduled_status({HOST: "n1", ZONE: "z1"}),
    )

    terms = out["nodeAffinity"][REQUIRED]["nodeSelectorTerms"]
    assert terms == [{"matchExpressions": [_expr(ZONE, "z1")]}]


def test_total_miss_equals_base(base_affinity, scheduled_status, dummy_ctx):
    out = inherit_affinity(
        base_affinity,
        {"policy": "Require", "require": ["rack"]},
        scheduled_status({HOST: "n1"}),
        ctx=dummy_ctx,
    )

    assert out == base_affinity
    assert dummy_ctx.events[-1]["message"] == "no inherited affinity"
    assert dummy_ctx.events[-1]["reason"] == "no_label_resolved"


def test_prefer_independent_terms(scheduled_status):
    out = inherit_affinity(
        None,
        {"policy": "Prefer", "prefer": [{"name": ZONE, "weight": 100}, {"name": REGION, "weight": 50}]},
        scheduled_status(FACTS),
    )

    node_affinity = out["nodeAffinity"]
    assert REQUIRED not in node_affinity
    assert node_affinity[PREFERRED] == [
        {"weight": 100, "preference": {"matchExpressions": [_expr(ZONE, "z1")]}},
        {"weight": 50, "preference": {"matchExpressions": [_expr(REGION, "r1")]}},
    ]


def test_prefer_partial_miss_keeps_resolved_terms(scheduled_status):
    out = inherit_affinity(
        None,
        {"policy": "Prefer", "prefer": [{"name": REGION, "weight": 80}, {"name": ZONE, "weight": 40}]},
        scheduled_status({ZONE: "z1"}),
    )

    assert out["nodeAffinity"][PREFERRED] == [
        {"weight": 40, "preference": {"matchExpressions": [_expr(ZONE, "z1")]}},
    ]


def test_malformed_require_list_is_not_a_host_pin(base_affinity, scheduled_status, dummy_ctx):
    """
    Verifica que uma lista require declarada, porém toda inválida, não fixa o host.

    Invariantes:
        - O resultado é exatamente a afinidade base
        - Nenhuma expressão de hostname é adicionada
    """
    out = inherit_affinity(
        base_affinity,
        {"policy": "Require", "require": ["  ", 7]},
        scheduled_status({HOST: "n1", ZONE: "z1"}),
        ctx=dummy_ctx,
    )

    assert out == base_affinity
    assert dummy_ctx.events[-1]["reason"] == "policy_none"


def test_malformed_prefer_list_adds_no_hostname_preference(scheduled_status):
    out = inherit_affinity(
        None,
        {"policy": "Prefer", "prefer": [{"name": ZONE, "weight": 0}]},
        scheduled_status({HOST: "n1", ZONE: "z1"}),
    )

    assert out is None


def test_multi_pod_predecessor_equals_base(make_operation, full_node, base_affinity, dummy_ctx):
    predecessor = record_placement(make_operation("train", parallelism=4), node=full_node, run_id="run-1")

    out = inherit_affinity(
        base_affinity,
        {"policy": "Require", "require": [HOST]},
        predecessor.status,
        ctx=dummy_ctx,
    )

    assert out == base_affinity
    assert dummy_ctx.events[-1]["reason"] == "predecessor_without_facts"


def test_missing_predecessor_status_equals_base(base_affinity):
    assert inherit_affinity(base_affinity, {"policy": "Prefer"}, None) == base_affinity


def test_pending_predecessor_has_no_facts(base_affinity):
    status = OperationStatus(node_affinity_labels=dict(FACTS))

    assert inherit_affinity(base_affinity, {"policy": "Require"}, status) == base_affinity


def test_idempotent(base_affinity, scheduled_status):
    strategy = {"policy": "Prefer", "prefer": [{"name": ZONE, "weight": 70}]}
    status = scheduled_status(FACTS)

    first = inherit_affinity(base_affinity, strategy, status)
    second = inherit_affinity(base_affinity, strategy, status)

    assert first == second


def test_non_destructive_merge(base_affinity, scheduled_status):
    """
    Verifica que a afinidade do usuário permanece intacta na saída.

    Invariantes:
        - A expressão disktype continua presente e em primeiro lugar
        - A expressão herdada é adicionada ao mesmo termo (AND)
        - A afinidade base de entrada não é mutada
    """
    original = deepcopy(base_affinity)

    out = inherit_affinity(base_affinity, {"policy": "Require", "require": [HOST]}, scheduled_status(FACTS))

    expressions = out["nodeAffinity"][REQUIRED]["nodeSelectorTerms"][0]["matchExpressions"]
    assert expressions == [_expr("disktype", "ssd"), _expr(HOST, "n1")]
    assert base_affinity == original


def test_default_substitution_matches_explicit_hostname(scheduled_status):
    status = scheduled_status(FACTS)

    implicit = inherit_affinity(None, {"policy": "Require"}, status)
    explicit = inherit_affinity(None, {"policy": "Require", "require": [HOST]}, status)

    assert implicit == explicit


def test_inherited_log_event(scheduled_status, dummy_ctx):
    inherit_affinity(
        None,
        {"policy": "Prefer", "prefer": [{"name": ZONE, "weight": 10}]},
        scheduled_status(FACTS),
        ctx=dummy_ctx,
        step_id="default/process",
    )

    ev = dummy_ctx.events_for("default/process")[-1]
    assert ev["message"] == "affinity inherited from predecessor"
    assert ev["policy"] == "Prefer"
    assert ev["labels"] == [ZONE]
    assert ev["required"] is False
    assert ev["preferred_terms"] == 1


# =====================================================
# Registry integration
# =====================================================

def test_affinity_for_operation_reads_predecessor(make_operation, scheduled_status, base_affinity):
    registry = OperationRegistry()
    registry.add(make_operation("load", status=scheduled_status(FACTS)))
    process = make_operation(
        "process",
        run_after="load",
        strategy={"policy": "Require", "require": [ZONE]},
        affinity=base_affinity,
    )
    registry.add(process)

    out = affinity_for_operation(process, registry)

    expressions = out["nodeAffinity"][REQUIRED]["nodeSelectorTerms"][0]["matchExpressions"]
    assert expressions == [_expr("disktype", "ssd"), _expr(ZONE, "z1")]


def test_affinity_for_operation_without_run_after(make_operation, base_affinity):
    op = make_operation("load", affinity=base_affinity)

    out = affinity_for_operation(op, OperationRegistry())

    assert out == base_affinity
    assert out is not base_affinity


def test_removed_predecessor_degrades(make_operation, base_affinity, dummy_ctx):
    process = make_operation(
        "process",
        run_after="load",
        strategy={"policy": "Require"},
        affinity=base_affinity,
    )

    out = affinity_for_operation(process, OperationRegistry(), ctx=dummy_ctx)

    assert out == base_affinity
    assert dummy_ctx.events_for(process.key)[-1]["reason"] == "predecessor_without_facts"


def test_predecessor_ready(make_operation, scheduled_status):
    registry = OperationRegistry()
    load = make_operation("load")
    registry.add(load)
    process = make_operation("process", run_after="load", strategy={"policy": "Require"})

    assert predecessor_ready(process, registry) is False

    registry.update(make_operation("load", status=scheduled_status(FACTS)))
    assert predecessor_ready(process, registry) is True


def test_predecessor_ready_without_strategy(make_operation):
    registry = OperationRegistry()
    registry.add(make_operation("load"))

    assert predecessor_ready(make_operation("process", run_after="load"), registry) is True
    assert predecessor_ready(make_operation("load"), registry) is True


def test_predecessor_ready_when_predecessor_failed(make_operation):
    registry = OperationRegistry()
    registry.add(make_operation("load", status=OperationStatus(phase=OperationPhase.FAILED)))
    process = make_operation("process", run_after="load", strategy={"policy": "Prefer"})

    assert predecessor_ready(process, registry) is True
