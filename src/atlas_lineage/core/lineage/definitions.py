# src/atlas_lineage/core/lineage/definitions.py
"""
Loader canônico de definições de pipeline.

Este módulo constrói snapshots `PipelineMeta` a partir de definições
declarativas em YAML ou JSON, lidas através do VFS do contexto.

Formato (v1):

    name: load_customers
    kind: transformation            # transformation | job
    default_extension: ktr          # opcional
    variables: {rootDir: /data}
    steps:
      - name: Read CSV
        type: CsvInput
        reads: ["${rootDir}/in.csv"]
      - name: Write output
        writes: [/data/out.csv]
      - name: Read per row
        dynamic: {field: filename, writes: false}
      - name: Call child
        sub_pipeline:
          method: filename          # filename | repository_name | repository_reference
          file_name: child.ktr
          directory: /etl           # repository_name
          name: child               # repository_name
          reference: 4f2a           # repository_reference

Formatos suportados:
    - YAML (.yaml, .yml, .ktr, .kjb)
    - JSON (.json)

Invariantes:
    - O conteúdo raiz e cada Step devem ser dicionários
    - Todo Step possui `name` não vazio e único no pipeline
    - Métodos de endereçamento desconhecidos são erro

Limites explícitos:
    - Não valida semântica do pipeline além do endereçamento de recursos
    - Não resolve variáveis (isso acontece na resolução)
"""

from __future__ import annotations

import json
import posixpath
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml  # PyYAML

from ..context import AnalysisContext
from ..exceptions import DefinitionError, FileResolutionError
from .dictionary import DEFAULT_EXTENSIONS, KIND_JOB, KIND_TRANSFORMATION
from .environment import UNRESOLVED_DROP, EnvironmentContext
from .model import (
    DynamicFilenameSource,
    FileReader,
    FileWriter,
    PipelineMeta,
    PipelineReference,
    StepMeta,
    bind_steps,
)
from .types import AddressingMethod
from .vfs import FileHandle


YAML_SUFFIXES = {".yaml", ".yml", ".ktr", ".kjb"}
JSON_SUFFIXES = {".json"}


def _invalid(message: str, **details: Any) -> DefinitionError:
    return DefinitionError(
        message=message,
        details=details,
        hint="Corrija a definição do pipeline conforme o formato v1.",
    )


def _as_paths(value: Any, *, step: str, key: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, Sequence):
        out = []
        for item in value:
            if not isinstance(item, str):
                raise _invalid("Caminho deve ser string", step=step, key=key, value=repr(item))
            out.append(item)
        return tuple(out)
    raise _invalid("Lista de caminhos inválida", step=step, key=key, value=repr(value))


def _parse_reference(raw: Any, *, step: str) -> Optional[PipelineReference]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise _invalid("sub_pipeline deve ser dict", step=step)
    try:
        method = AddressingMethod.parse(raw.get("method"))
    except ValueError as e:
        raise _invalid("Método de endereçamento desconhecido", step=step, method=raw.get("method")) from e
    return PipelineReference(
        method=method,
        file_name=raw.get("file_name"),
        directory_path=raw.get("directory"),
        pipeline_name=raw.get("name"),
        object_reference=None if raw.get("reference") is None else str(raw.get("reference")),
    )


def _parse_dynamic(raw: Any, *, step: str) -> Optional[DynamicFilenameSource]:
    if raw is None:
        return None
    if isinstance(raw, str):
        return DynamicFilenameSource(accepting_field=raw)
    if not isinstance(raw, dict):
        raise _invalid("dynamic deve ser dict ou nome de campo", step=step)
    return DynamicFilenameSource(
        accepting_field=raw.get("field"),
        enabled=bool(raw.get("enabled", True)),
        writes=bool(raw.get("writes", False)),
    )


def _parse_step(raw: Any, index: int) -> StepMeta:
    if not isinstance(raw, dict):
        raise _invalid("Step deve ser dict", index=index)
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise _invalid("step.name deve ser string não vazia", index=index)

    reads = _as_paths(raw.get("reads"), step=name, key="reads")
    writes = _as_paths(raw.get("writes"), step=name, key="writes")
    variables = raw.get("variables") or {}
    if not isinstance(variables, dict):
        raise _invalid("step.variables deve ser dict", step=name)

    return StepMeta(
        name=name,
        step_type=raw.get("type"),
        file_reader=FileReader(reads) if reads else None,
        file_writer=FileWriter(writes) if writes else None,
        dynamic_filename=_parse_dynamic(raw.get("dynamic"), step=name),
        sub_pipeline=_parse_reference(raw.get("sub_pipeline"), step=name),
        variables=dict(variables),
    )


def parse_pipeline_definition(
    data: Any,
    *,
    filename: Optional[str] = None,
    parent_environment: Optional[EnvironmentContext] = None,
    repository: Any = None,
    unresolved_policy: Optional[str] = None,
    parent_step: Optional[StepMeta] = None,
) -> PipelineMeta:
    """
    Constrói um `PipelineMeta` (com Steps vinculados) a partir de um dict.

    Args:
        data: conteúdo já desserializado da definição.
        filename: caminho canônico do arquivo de origem, se houver.
        parent_environment: ambiente do Step chamador (pipelines aninhados).
        repository: conexão de repositório ativa para este pipeline.
        unresolved_policy: política de tokens sem binding (padrão: drop).
        parent_step: Step que chama este pipeline, se houver.

    Raises:
        DefinitionError: se a estrutura não respeitar o formato v1.
    """
    if not isinstance(data, dict):
        raise _invalid("Definição de pipeline deve ser dict", received=type(data).__name__)

    suffix = posixpath.splitext(filename)[1].lstrip(".").lower() if filename else ""

    kind = data.get("kind") or (KIND_JOB if suffix == DEFAULT_EXTENSIONS[KIND_JOB] else KIND_TRANSFORMATION)
    if kind not in DEFAULT_EXTENSIONS:
        raise _invalid("kind desconhecido", kind=kind)

    name = data.get("name")
    if name is None and filename:
        name = posixpath.splitext(posixpath.basename(filename.replace("\\", "/")))[0]

    variables = data.get("variables") or {}
    if not isinstance(variables, dict):
        raise _invalid("variables deve ser dict", pipeline=name)

    raw_steps = data.get("steps") or []
    if not isinstance(raw_steps, list):
        raise _invalid("steps deve ser lista", pipeline=name)

    steps: List[StepMeta] = [_parse_step(raw, i) for i, raw in enumerate(raw_steps)]
    seen = set()
    for s in steps:
        if s.name in seen:
            raise _invalid("Step duplicado", pipeline=name, step=s.name)
        seen.add(s.name)

    environment = EnvironmentContext(
        variables=dict(variables),
        parent=parent_environment,
        directory=data.get("directory"),
        repository=repository,
        unresolved_policy=unresolved_policy or UNRESOLVED_DROP,
    )

    pipeline = PipelineMeta(
        name=name,
        filename=filename,
        directory=data.get("directory"),
        default_extension=data.get("default_extension") or suffix or DEFAULT_EXTENSIONS[kind],
        kind=kind,
        repository_directory=data.get("repository_directory"),
        environment=environment,
        parent_step=parent_step,
    )
    return bind_steps(pipeline, steps)


def load_pipeline_definition(
    scope: AnalysisContext,
    path: Union[str, FileHandle],
    *,
    parent_environment: Optional[EnvironmentContext] = None,
    repository: Any = None,
    parent_step: Optional[StepMeta] = None,
) -> PipelineMeta:
    """
    Lê e interpreta uma definição de pipeline através do VFS de `scope`.

    A política de substituição vem de `substitution.unresolved` na
    configuração do contexto.

    Raises:
        FileResolutionError: se o arquivo não puder ser resolvido ou lido.
        DefinitionError: formato não suportado ou conteúdo inválido.
    """
    handle = path if isinstance(path, FileHandle) else scope.vfs.resolve(path, scope.working_directory)
    suffix = posixpath.splitext(handle.path.replace("\\", "/"))[1].lower()
    if suffix not in YAML_SUFFIXES and suffix not in JSON_SUFFIXES:
        raise _invalid("Formato de definição não suportado", location=scope.vfs.public_location(handle))

    if not scope.vfs.exists(handle):
        raise FileResolutionError(
            message="Definição de pipeline não encontrada",
            details={"location": scope.vfs.public_location(handle)},
        )
    text = scope.vfs.read_text(handle)

    try:
        data: Dict[str, Any] = json.loads(text) if suffix in JSON_SUFFIXES else yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as e:
        raise _invalid(
            "Definição de pipeline ilegível",
            location=scope.vfs.public_location(handle),
            reason=str(e),
        ) from e

    return parse_pipeline_definition(
        data if data is not None else {},
        filename=scope.vfs.canonical_path(handle),
        parent_environment=parent_environment,
        repository=repository,
        unresolved_policy=scope.setting("substitution.unresolved", UNRESOLVED_DROP),
        parent_step=parent_step,
    )
