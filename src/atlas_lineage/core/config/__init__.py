# src/atlas_lineage/core/config/__init__.py

"""
Camada de configuração do Atlas Lineage.

Este pacote carrega, mescla e identifica a configuração efetiva usada
pela resolução de recursos e pelo analyzer de pipelines.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Leitura de chaves pontuadas (`substitution.unresolved`)
    - Geração de hash canônico para rastreabilidade da análise

Chaves reconhecidas (v1):
    - substitution.unresolved       → drop | keep | fail
    - repository.include_deleted    → bool
    - analyzer.follow_sub_pipelines → bool
    - analyzer.max_depth            → int
    - document.namespace            → str

Limites explícitos:
    - Não resolve caminhos nem carrega pipelines
    - Não depende de VFS ou repositório
"""

from .errors import (
    ConfigError,
    DefaultsNotFoundError,
    UnsupportedConfigFormatError,
    InvalidConfigRootTypeError,
    ConfigTypeConflictError,
    InvalidSettingError,
)
from .hashing import compute_config_hash
from .loader import DEFAULT_CONFIG, get_setting, load_config, validate_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "DefaultsNotFoundError",
    "UnsupportedConfigFormatError",
    "InvalidConfigRootTypeError",
    "ConfigTypeConflictError",
    "InvalidSettingError",
    "compute_config_hash",
    "DEFAULT_CONFIG",
    "get_setting",
    "load_config",
    "validate_config",
    "deep_merge",
]
