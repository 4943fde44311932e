# src/locality_dataflow/__init__.py
"""
Locality DataFlow — herança de localidade entre Operations encadeadas.

Quando uma Operation de um pipeline de dados executa depois de outra
(runAfter), suas restrições de scheduling podem herdar o Node, a zona ou
a região efetivamente observados para o predecessor, mantendo passos
encadeados próximos e evitando movimentação de dados entre Nodes.

Arquitetura em alto nível:
    - core.config    → carregamento, merge e settings de afinidade
    - core.pipeline  → tipos de Operation, ciclo de vida, registry e RunContext
    - core.affinity  → recorder, resolver, translator, composer e inheritance

Limites explícitos:
    - Não executa o loop de reconciliação
    - Não renderiza nem submete workloads
    - Não conversa com o scheduler do cluster
"""
# src/locality_dataflow/__init__.py
from .core.affinity.inheritance import affinity_for_operation, inherit_affinity, predecessor_ready
from .core.affinity.recorder import record_placement

__all__ = ["affinity_for_operation", "inherit_affinity", "predecessor_ready", "record_placement"]
