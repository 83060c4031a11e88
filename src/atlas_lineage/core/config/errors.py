# src/atlas_lineage/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Atlas Lineage.

As exceções aqui definidas representam violações estruturais da
configuração e são sempre fatais: o analyzer não tenta adivinhar
valores ausentes ou inválidos.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de resolução de recursos
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Atlas Lineage.

    Permite captura genérica de falhas de configuração, distinta das
    falhas de resolução (`atlas_lineage.core.exceptions`).
    """


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório quando informado a `load_config`;
    o loader não cria defaults implicitamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Formato de arquivo de configuração não suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um dicionário (`dict`)."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"substitution": {"unresolved": "drop"}}
        - override: {"substitution": "strict"}

    Nenhum merge parcial é produzido em caso de conflito.
    """


class InvalidSettingError(ConfigError):
    """Valor de uma chave conhecida fora do domínio permitido."""
