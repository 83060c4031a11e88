# src/atlas_lineage/core/config/loader.py
"""
Loader canônico de configuração do Atlas Lineage.

A configuração efetiva é resolvida a partir de:
    - `DEFAULT_CONFIG` embutido no pacote
    - um arquivo de defaults do projeto (opcional; obrigatório se informado)
    - um arquivo local de overrides (opcional; ignorado se ausente)

Responsabilidades do módulo:
    - Carregar arquivos de configuração em YAML ou JSON
    - Validar requisitos estruturais mínimos (tipo raiz)
    - Resolver a configuração final via deep-merge determinístico
    - Validar o domínio das chaves conhecidas

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não resolve caminhos de pipeline nem variáveis de ambiente
    - Não persiste configuração ou hash
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .hashing import compute_config_hash
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingError,
    UnsupportedConfigFormatError,
)


UNRESOLVED_POLICIES = ("drop", "keep", "fail")

DEFAULT_CONFIG: Dict[str, Any] = {
    "substitution": {"unresolved": "drop"},
    "repository": {"include_deleted": True},
    "analyzer": {"follow_sub_pipelines": False, "max_depth": 5},
    "document": {"namespace": "default"},
}


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def validate_config(config: Dict[str, Any]) -> None:
    """
    Valida o domínio das chaves conhecidas da configuração efetiva.

    Raises:
        InvalidSettingError: valor fora do domínio aceito.
    """
    policy = get_setting(config, "substitution.unresolved")
    if policy not in UNRESOLVED_POLICIES:
        raise InvalidSettingError(
            f"substitution.unresolved deve ser um de {UNRESOLVED_POLICIES}, recebido: {policy!r}"
        )

    max_depth = get_setting(config, "analyzer.max_depth")
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0:
        raise InvalidSettingError(
            f"analyzer.max_depth deve ser inteiro >= 0, recebido: {max_depth!r}"
        )


def get_setting(config: Optional[Dict[str, Any]], key: str, default: Any = None) -> Any:
    """
    Lê uma chave pontuada (`"analyzer.max_depth"`) da configuração.

    Chaves ausentes em `config` caem para `DEFAULT_CONFIG` e, por fim,
    para `default`.
    """
    for source in (config or {}, DEFAULT_CONFIG):
        node: Any = source
        found = True
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                found = False
                break
            node = node[part]
        if found:
            return node
    return default


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva da análise de lineage.

    Política de resolução:
        - `DEFAULT_CONFIG` é sempre a base
        - O arquivo de defaults, quando informado, deve existir
        - O arquivo local é opcional e tem prioridade sobre defaults

    Args:
        defaults_path (Optional[str]): Caminho para o arquivo de defaults do projeto.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults informado não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
        InvalidSettingError: Se uma chave conhecida tiver valor inválido.
    """

    effective = deep_merge(DEFAULT_CONFIG, {})

    if defaults_path is not None:
        effective = deep_merge(effective, _load_file(Path(defaults_path)))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    validate_config(effective)

    # valores não serializáveis em JSON falham aqui, não na análise
    _ = compute_config_hash(effective)

    return effective
