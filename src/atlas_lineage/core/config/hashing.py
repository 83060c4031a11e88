# src/atlas_lineage/core/config/hashing.py
"""
Hashing canônico de configuração do Atlas Lineage.

O hash identifica a configuração efetiva de uma análise. Ele é exposto
como `AnalysisContext.config_hash`, para que dois `AnalysisResult`s só
sejam comparados quando produzidos sob a mesma política de resolução
(`substitution.unresolved`, `analyzer.max_depth`, ...). `load_config`
também o calcula para rejeitar cedo valores não serializáveis em JSON.

Política (v1): JSON canônico (chaves ordenadas, separadores compactos,
UTF-8) + SHA-256.
"""


import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o SHA-256 hexadecimal (64 caracteres) da configuração.

    Configurações estruturalmente equivalentes produzem o mesmo hash,
    independentemente da ordem original das chaves.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
