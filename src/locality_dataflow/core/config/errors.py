# src/locality_dataflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Locality DataFlow.

Este módulo define a hierarquia de exceções levantadas durante o
carregamento, o merge e a interpretação das configurações de afinidade.

As exceções aqui definidas representam **configuração inválida**, detectada
antes que qualquer Operation tenha seu pod template gerado. Elas nunca são
levantadas pelo cálculo de herança de afinidade em si.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de scheduling ou de herança

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende de RunContext, registry ou engine de afinidade
"""


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do Locality DataFlow.

    Permite captura genérica de falhas estruturais de configuração,
    separando-as de degradações da herança de afinidade (que nunca
    levantam exceção).
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório quando a configuração é carregada
    a partir de disco; o loader não cria nem infere defaults.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"affinity": {"labels": {...}}}
        - override: {"affinity": "hostname"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidAffinitySettingsError(ConfigError):
    """
    Seção `affinity` da configuração possui valores inválidos.

    Exemplos:
        - label de topologia vazio ou não-string
        - `default_prefer_weight` fora do intervalo 1..100
        - `invalid_weight` diferente de `drop` ou `clamp`

    Esta validação ocorre uma única vez, no momento em que as settings
    são construídas. O cálculo de herança assume settings já válidas.
    """
