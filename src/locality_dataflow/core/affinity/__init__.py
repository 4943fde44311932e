# src/locality_dataflow/core/affinity/__init__.py
"""
Engine de herança de afinidade do Locality DataFlow.

Componentes (das folhas para a raiz):
    - recorder    → placement facts de uma Operation alocada
    - strategy    → forma canônica da estratégia declarada
    - translator  → (estratégia, facts) → fragmento de nodeAffinity
    - composer    → fragmento + afinidade base → afinidade final
    - inheritance → pipeline único usado por todos os geradores de pod template

O recorder escreve facts no status do predecessor como efeito de seu
próprio scheduling. Depois, na geração do pod template do dependente,
strategy → translator → composer rodam de forma síncrona e pura.
"""
