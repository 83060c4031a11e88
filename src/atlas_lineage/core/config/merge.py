# src/atlas_lineage/core/config/merge.py
"""
Deep-merge da configuração de lineage.

Aplica overrides parciais sobre `DEFAULT_CONFIG`: é usado por
`load_config` (defaults do projeto + overrides locais) e por
`AnalysisContext.create` (config passada em código). Um override como
`{"analyzer": {"max_depth": 2}}` muda uma chave sem apagar
`analyzer.follow_sub_pipelines`.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - conflito de tipos → erro estrutural explícito

O merge é puramente funcional: nenhum input é mutado.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` (defaults) com `override` e devolve um novo dicionário.

    Chaves ausentes no override são preservadas da base; `bool` e `int`
    são tratados como tipos distintos (um `true` não sobrescreve `5`).

    Args:
        base (Dict[str, Any]): Configuração base (ex.: DEFAULT_CONFIG).
        override (Dict[str, Any]): Overrides explícitos.

    Returns:
        Dict[str, Any]: Configuração resultante.

    Raises:
        ConfigTypeConflictError: Se uma chave tiver tipos incompatíveis.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    merged: Dict[str, Any] = deepcopy(base)

    for key, incoming in override.items():
        if key not in merged:
            merged[key] = deepcopy(incoming)
            continue

        current = merged[key]

        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = deep_merge(current, incoming)
            continue

        if isinstance(incoming, list):
            merged[key] = deepcopy(incoming)
            continue

        # chave vazia no YAML local (`max_depth:`) mantém o default
        if incoming is None:
            continue

        if type(current) is not type(incoming) and current is not None:
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(current).__name__} vs {type(incoming).__name__}"
            )

        merged[key] = deepcopy(incoming)

    return merged
