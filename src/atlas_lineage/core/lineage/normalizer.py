# src/atlas_lineage/core/lineage/normalizer.py
"""
Normalização canônica de caminhos.

Duas variantes com contratos distintos:
    - normalize_file_path         → estrita; falhas do VFS propagam
      (`FileResolutionError`). Usada onde o lineage é autoritativo, como
      a propriedade `path` de um documento.
    - normalize_file_path_safely  → nunca levanta; em falha registra um
      WARNING no contexto e devolve o caminho original.

Formato canônico:
    - `file` → caminho local absoluto, sem esquema
    - demais esquemas → URI pública (`ram:///a/b`)
"""

from __future__ import annotations

from typing import Optional

from ..context import AnalysisContext
from ..errors import path_normalization_failed
from ..exceptions import FileResolutionError


def normalize_file_path(scope: AnalysisContext, raw_path: Optional[str]) -> Optional[str]:
    """
    Resolve `raw_path` pelo VFS de `scope` e devolve sua forma canônica.

    Caminhos relativos são resolvidos contra `scope.working_directory`
    (ou o diretório de trabalho do processo).

    Raises:
        FileResolutionError: se o VFS não conseguir resolver o caminho.
    """
    if raw_path is None:
        return None
    try:
        handle = scope.vfs.resolve(raw_path, scope.working_directory)
        return scope.vfs.canonical_path(handle)
    except FileResolutionError:
        raise
    except Exception as e:
        raise FileResolutionError(
            message="Falha inesperada ao normalizar caminho",
            details={"path": raw_path, "exc_type": e.__class__.__name__, "reason": str(e)},
        ) from e


def normalize_file_path_safely(
    scope: AnalysisContext,
    raw_path: Optional[str],
    *,
    step_id: Optional[str] = None,
) -> Optional[str]:
    """Como `normalize_file_path`, mas devolve `raw_path` intacto em qualquer falha."""
    try:
        return normalize_file_path(scope, raw_path)
    except FileResolutionError as e:
        payload = path_normalization_failed(path=raw_path, reason=e.message, step=step_id)
        scope.warn(step_id=step_id, message=payload.message, error=payload.to_dict())
        return raw_path
