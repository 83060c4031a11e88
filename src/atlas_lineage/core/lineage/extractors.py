# src/atlas_lineage/core/lineage/extractors.py
"""
Extração de recursos externos tocados por um Step.

Duas formas de descobrir recursos:
    - estática   → caminhos configurados no próprio Step
    - por linha  → caminho calculado a partir de um campo da linha de dados

Ambas são best-effort: falhas de VFS viram eventos WARNING no contexto e
nunca interrompem a análise.

Invariantes:
    - O resultado é sempre um `frozenset` de `ResourceDescriptor`
    - Mesmo local + mesma direção colapsam em um único descritor
    - Steps sem a capacidade correspondente produzem conjunto vazio
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Optional, Sequence

from ..context import AnalysisContext
from ..errors import path_normalization_failed
from ..exceptions import FileResolutionError
from .model import RowSchema, StepMeta
from .normalizer import normalize_file_path_safely
from .types import ResourceDescriptor, ResourceDirection
from .vfs import VirtualFileSystem


def extract_static_resources(
    scope: AnalysisContext,
    step: StepMeta,
    declared_paths: Optional[Iterable[str]],
) -> FrozenSet[ResourceDescriptor]:
    """
    Converte os caminhos declarados de `step` em descritores normalizados.

    A direção vem da capacidade que declara o caminho: `FileReader` →
    `input`, `FileWriter` → `output`. Um caminho declarado pelas duas gera
    um descritor para cada direção. Caminhos vazios são ignorados.
    """
    if not declared_paths:
        return frozenset()

    out = set()
    for raw in declared_paths:
        if not raw:
            continue
        location = normalize_file_path_safely(scope, raw, step_id=step.name)
        for direction in step.path_directions(raw):
            out.add(
                ResourceDescriptor(
                    location=location,
                    direction=direction,
                    pipeline_name=step.pipeline_name,
                    step_name=step.name,
                )
            )
    return frozenset(out)


def extract_from_row(
    scope: AnalysisContext,
    step: StepMeta,
    row_schema: RowSchema,
    row: Sequence[Any],
) -> FrozenSet[ResourceDescriptor]:
    """
    Resolve o arquivo que `step` toca para uma única linha de dados.

    Regras:
        - Apenas Steps com `DynamicFilenameSource` habilitado produzem resultado
        - Nome de arquivo vazio → conjunto vazio
        - Nome com esquema (`file://`, `ram://`) → resolvido direto pelo VFS,
          relativo ao diretório de trabalho do contexto quando o esquema é local
        - Caminho sem esquema → variáveis do Step substituídas, depois VFS
    """
    if not step.is_accepting_filenames:
        return frozenset()

    source = step.dynamic_filename
    filename = row_schema.get_string(row, source.accepting_field)
    if not filename or not filename.strip():
        return frozenset()

    try:
        target = filename
        if not VirtualFileSystem.starts_with_scheme(target):
            target = step.environment_substitute(target)
        handle = scope.vfs.resolve(target, scope.working_directory)
        location = scope.vfs.public_location(handle)
    except FileResolutionError as e:
        payload = path_normalization_failed(path=filename, reason=e.message, step=step.name)
        scope.warn(step_id=step.name, message=payload.message, error=payload.to_dict())
        return frozenset()

    return frozenset(
        {
            ResourceDescriptor(
                location=location,
                direction=ResourceDirection.from_writes(source.writes),
                pipeline_name=step.pipeline_name,
                step_name=step.name,
            )
        }
    )


def extract_from_frame(scope: AnalysisContext, step: StepMeta, frame: Any) -> FrozenSet[ResourceDescriptor]:
    """União de `extract_from_row` sobre todas as linhas de um `pandas.DataFrame`."""
    try:
        import pandas as pd  # type: ignore
    except Exception as e:
        raise RuntimeError("pandas is required for extract_from_frame") from e

    if not isinstance(frame, pd.DataFrame):
        raise TypeError("frame deve ser um pandas.DataFrame")

    if not step.is_accepting_filenames or frame.empty:
        return frozenset()

    schema = RowSchema(field_names=tuple(str(c) for c in frame.columns))
    out = set()
    for values in frame.itertuples(index=False, name=None):
        # NaN/None de colunas esparsas equivalem a nome vazio
        row = tuple(None if pd.api.types.is_scalar(v) and pd.isna(v) else v for v in values)
        out |= extract_from_row(scope, step, schema, row)
    return frozenset(out)
