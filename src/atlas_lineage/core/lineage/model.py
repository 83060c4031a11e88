# src/atlas_lineage/core/lineage/model.py
"""
Snapshots imutáveis de pipelines, Steps e referências a sub-pipelines.

Os resolvedores e extratores operam exclusivamente sobre estes objetos.
Eles são construídos uma vez por passada de análise (a partir de um
arquivo de definição, de um repositório ou diretamente em código) e nunca
são mutados depois disso.

Componentes principais:
    - PipelineMeta          → pipeline (transformation/job) e seu ambiente
    - StepMeta              → Step com capacidades opcionais
    - FileReader/FileWriter → capacidade de tocar arquivos estaticamente
    - DynamicFilenameSource → capacidade de receber nomes de arquivo por linha
    - PipelineReference     → referência declarada a um sub-pipeline
    - RowSchema             → nomes de campos de uma linha de dados

Decisões arquiteturais:
    - Capacidades são verificadas por presença, nunca por tipo concreto
    - A hierarquia é navegada apenas para cima (Step → pipeline pai →
      Step pai → ...), por links explícitos
    - O link Step → pipeline pai aponta para o snapshot do pipeline sem
      a lista de Steps; a navegação para cima não precisa dela

Limites explícitos:
    - Não resolve caminhos nem carrega sub-pipelines
    - Não lê arquivos
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .dictionary import KIND_TRANSFORMATION
from .environment import EnvironmentContext
from .types import AddressingMethod, ResourceDirection


# -----------------------------
# Capacidades de Step
# -----------------------------

@dataclass(frozen=True)
class FileReader:
    """O Step lê os arquivos configurados em `file_paths`."""
    file_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileWriter:
    """O Step escreve os arquivos configurados em `file_paths`."""
    file_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DynamicFilenameSource:
    """
    O Step recebe o nome do arquivo de um campo da linha de entrada.

    `writes` indica se o arquivo calculado por linha é escrito (output)
    ou lido (input, padrão).
    """
    accepting_field: Optional[str]
    enabled: bool = True
    writes: bool = False


# -----------------------------
# Referência a sub-pipeline
# -----------------------------

@dataclass(frozen=True)
class PipelineReference:
    """
    Referência declarada por um Step a um pipeline aninhado.

    Campos:
        - method: método de endereçamento ativo (None = não declarado)
        - file_name: caminho declarado (FILENAME e, opcionalmente, REPOSITORY_NAME)
        - directory_path / pipeline_name: endereço no repositório
        - object_reference: id imutável no repositório (REPOSITORY_REFERENCE)
        - step: Step dono da referência
        - sub_pipeline: pipeline aninhado já resolvido, se houver
    """
    method: Optional[AddressingMethod] = None
    file_name: Optional[str] = None
    directory_path: Optional[str] = None
    pipeline_name: Optional[str] = None
    object_reference: Optional[str] = None
    step: Optional["StepMeta"] = field(default=None, compare=False, repr=False)
    sub_pipeline: Optional["PipelineMeta"] = field(default=None, compare=False, repr=False)

    @property
    def parent_pipeline(self) -> Optional["PipelineMeta"]:
        return self.step.parent_pipeline if self.step is not None else None

    @property
    def repository_path(self) -> Optional[str]:
        if not self.pipeline_name:
            return None
        if not self.directory_path:
            return self.pipeline_name
        return posixpath.join(self.directory_path, self.pipeline_name)

    @property
    def declared_path(self) -> Optional[str]:
        if self.file_name:
            return self.file_name
        if self.method is AddressingMethod.REPOSITORY_NAME:
            return self.repository_path
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value if self.method else None,
            "file_name": self.file_name,
            "directory_path": self.directory_path,
            "pipeline_name": self.pipeline_name,
            "object_reference": self.object_reference,
            "step": self.step.name if self.step else None,
            "pipeline": self.step.pipeline_name if self.step else None,
        }


# -----------------------------
# Pipeline / Step
# -----------------------------

@dataclass(frozen=True)
class PipelineMeta:
    """
    Snapshot de um pipeline (transformation ou job).

    `filename` é o caminho completo do arquivo de definição, quando o
    pipeline veio de arquivo; `repository_directory` é o diretório no
    repositório, quando veio de repositório.
    """
    name: Optional[str]
    filename: Optional[str] = None
    directory: Optional[str] = None
    default_extension: Optional[str] = None
    kind: str = KIND_TRANSFORMATION
    repository_directory: Optional[str] = None
    environment: EnvironmentContext = field(default_factory=EnvironmentContext, compare=False, repr=False)
    steps: Tuple["StepMeta", ...] = field(default=(), compare=False, repr=False)
    parent_step: Optional["StepMeta"] = field(default=None, compare=False, repr=False)

    @property
    def path_and_name(self) -> Optional[str]:
        """
        Caminho + nome sem a extensão padrão (arquivo) ou diretório + nome
        (repositório). Sem `default_extension`, o arquivo é mantido inteiro.
        """
        if self.filename:
            base, ext = posixpath.splitext(self.filename)
            if ext and ext.lstrip(".") == self.default_extension:
                return base
            return self.filename
        if self.repository_directory and self.name:
            return posixpath.join(self.repository_directory, self.name)
        return None

    @property
    def repository(self) -> Any:
        return self.environment.find_repository()

    def working_directory(self) -> Optional[str]:
        if self.directory:
            return self.directory
        if self.filename:
            parent = posixpath.dirname(self.filename.replace("\\", "/"))
            if parent:
                return parent
        return self.environment.working_directory()

    def environment_substitute(self, template: Optional[str], policy: Optional[str] = None) -> Optional[str]:
        return self.environment.substitute(template, policy=policy)

    def step(self, name: str) -> "StepMeta":
        for s in self.steps:
            if s.name == name:
                return s
        raise KeyError(name)


@dataclass(frozen=True)
class StepMeta:
    """
    Snapshot de um Step com capacidades opcionais.

    Um Step sem nenhuma capacidade é válido: não toca recursos externos.
    """
    name: str
    step_type: Optional[str] = None
    file_reader: Optional[FileReader] = None
    file_writer: Optional[FileWriter] = None
    dynamic_filename: Optional[DynamicFilenameSource] = None
    sub_pipeline: Optional[PipelineReference] = None
    variables: Dict[str, Any] = field(default_factory=dict, compare=False)
    parent_pipeline: Optional[PipelineMeta] = field(default=None, compare=False, repr=False)

    @property
    def pipeline_name(self) -> Optional[str]:
        return self.parent_pipeline.name if self.parent_pipeline is not None else None

    @property
    def writes_to_file(self) -> bool:
        return self.file_writer is not None

    @property
    def is_accepting_filenames(self) -> bool:
        return self.dynamic_filename is not None and self.dynamic_filename.enabled

    @property
    def environment(self) -> EnvironmentContext:
        """Ambiente do Step: variáveis locais sobre o ambiente do pipeline pai."""
        if self.parent_pipeline is None:
            return EnvironmentContext(variables=dict(self.variables))
        return self.parent_pipeline.environment.child(self.variables)

    def environment_substitute(self, template: Optional[str], policy: Optional[str] = None) -> Optional[str]:
        return self.environment.substitute(template, policy=policy)

    def declared_file_paths(self, accepting_filenames: Optional[bool] = None) -> List[str]:
        """Caminhos configurados estaticamente; vazio se o Step recebe nomes por linha."""
        accepting = self.is_accepting_filenames if accepting_filenames is None else accepting_filenames
        if accepting:
            return []
        paths: List[str] = []
        for capability in (self.file_reader, self.file_writer):
            if capability is None:
                continue
            for p in capability.file_paths:
                if p and p not in paths:
                    paths.append(p)
        return paths

    def path_directions(self, path: str) -> List[ResourceDirection]:
        """
        Direções com que o Step toca `path`, pela capacidade que o declara.

        Caminhos que nenhuma capacidade declara seguem a orientação do Step
        (`output` se houver `FileWriter`).
        """
        directions: List[ResourceDirection] = []
        if self.file_reader is not None and path in self.file_reader.file_paths:
            directions.append(ResourceDirection.INPUT)
        if self.file_writer is not None and path in self.file_writer.file_paths:
            directions.append(ResourceDirection.OUTPUT)
        return directions or [ResourceDirection.from_writes(self.writes_to_file)]

    @property
    def sub_pipeline_reference(self) -> Optional[PipelineReference]:
        if self.sub_pipeline is None:
            return None
        return replace(self.sub_pipeline, step=self)


def bind_steps(pipeline: PipelineMeta, steps: Iterable[StepMeta]) -> PipelineMeta:
    """Devolve uma cópia de `pipeline` cujos Steps apontam para ele como pai."""
    bound = tuple(replace(s, parent_pipeline=pipeline) for s in steps)
    return replace(pipeline, steps=bound)


# -----------------------------
# Linhas de dados
# -----------------------------

@dataclass(frozen=True)
class RowSchema:
    """Nomes de campos de uma linha, na ordem dos valores."""
    field_names: Tuple[str, ...] = ()

    def index_of(self, name: Optional[str]) -> int:
        if name is None:
            return -1
        try:
            return self.field_names.index(name)
        except ValueError:
            return -1

    def get_string(self, row: Sequence[Any], name: Optional[str], default: Optional[str] = None) -> Optional[str]:
        idx = self.index_of(name)
        if idx < 0 or row is None or idx >= len(row):
            return default
        value = row[idx]
        if value is None:
            return default
        return str(value)
