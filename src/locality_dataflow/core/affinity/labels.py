# src/locality_dataflow/core/affinity/labels.py
"""
Chaves de label bem conhecidas da plataforma de orquestração.

Estes são os três labels de topologia que o Kubernetes aplica a cada Node
e que o recorder sempre tenta capturar como placement facts.
"""

HOSTNAME_LABEL = "kubernetes.io/hostname"
ZONE_LABEL = "topology.kubernetes.io/zone"
REGION_LABEL = "topology.kubernetes.io/region"

DEFAULT_PREFER_WEIGHT = 100

# Intervalo convencional de peso para termos preferred do scheduler.
MIN_PREFER_WEIGHT = 1
MAX_PREFER_WEIGHT = 100

# Chaves do nodeAffinity nativo (camelCase, formato do pod spec).
REQUIRED_KEY = "requiredDuringSchedulingIgnoredDuringExecution"
PREFERRED_KEY = "preferredDuringSchedulingIgnoredDuringExecution"
