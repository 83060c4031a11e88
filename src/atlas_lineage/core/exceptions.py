"""
Atlas Lineage — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas Lineage.

Objetivo:
- Permitir que resolvedores, extratores e o analyzer levantem exceções
  semânticas tipadas
- Facilitar o mapeamento determinístico para AtlasErrorPayload
- Evitar ValueError/RuntimeError genéricos em falhas de resolução

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Falhas "soft" (normalização, substituição) são tratadas localmente pelos
  chamadores; apenas `ResolutionError` é autoritativa.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class AtlasException(Exception):
    """Base class para exceções internas do Atlas.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Resolução de caminhos / VFS
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileResolutionError(AtlasException):
    """O VFS não conseguiu resolver ou ler um caminho."""


@dataclass(frozen=True)
class SubstitutionError(AtlasException):
    """Tokens de variável sem binding sob política `fail`."""


# ---------------------------------------------------------------------------
# Repositório / definições
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RepositoryError(AtlasException):
    """Falha no repositório (diretório ou pipeline inexistente)."""


@dataclass(frozen=True)
class DefinitionError(AtlasException):
    """Definição de pipeline estruturalmente inválida."""


# ---------------------------------------------------------------------------
# Sub-pipelines
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolutionError(AtlasException):
    """Nenhuma estratégia conseguiu carregar o sub-pipeline referenciado.

    `reference` carrega a referência original (PipelineReference) para
    diagnóstico; `details["attempts"]` lista o resultado de cada estratégia.
    """

    reference: Any = None
