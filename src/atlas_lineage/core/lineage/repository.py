# src/atlas_lineage/core/lineage/repository.py
"""
Capacidade de repositório de pipelines.

O core consome o repositório apenas através do protocolo `Repository`;
a conexão é emprestada por chamada e nunca tem seu ciclo de vida
gerenciado aqui.

`InMemoryRepository` é a implementação de referência usada em análises
locais e em testes: pipelines são indexados por diretório + nome e por
id imutável de objeto.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Set, Tuple, runtime_checkable

from ..exceptions import RepositoryError
from .model import PipelineMeta


@dataclass(frozen=True)
class RepositoryDirectory:
    path: str

    @property
    def name(self) -> str:
        return posixpath.basename(self.path) or "/"


@runtime_checkable
class Repository(Protocol):
    def find_directory(self, path: Optional[str]) -> Optional[RepositoryDirectory]:
        ...

    def load_pipeline(
        self,
        name: str,
        directory: Optional[RepositoryDirectory],
        revision: Optional[str] = None,
        include_deleted: bool = True,
        monitor: Any = None,
    ) -> PipelineMeta:
        ...

    def load_pipeline_by_reference(self, reference_id: str, revision: Optional[str] = None) -> PipelineMeta:
        ...


def normalize_repository_path(path: Optional[str]) -> str:
    if not path:
        return "/"
    normalized = posixpath.normpath("/" + path.replace("\\", "/").lstrip("/"))
    return normalized


@dataclass
class InMemoryRepository:
    """
    Repositório em memória.

    Pipelines marcados como removidos só são devolvidos quando
    `include_deleted=True`.
    """

    _by_path: Dict[Tuple[str, str], PipelineMeta] = field(default_factory=dict, init=False, repr=False)
    _by_reference: Dict[str, Tuple[str, str]] = field(default_factory=dict, init=False, repr=False)
    _deleted: Set[Tuple[str, str]] = field(default_factory=set, init=False, repr=False)

    def add(
        self,
        directory: str,
        pipeline: PipelineMeta,
        *,
        reference_id: Optional[str] = None,
        deleted: bool = False,
    ) -> None:
        if not pipeline.name:
            raise ValueError("pipeline.name must be a non-empty string")
        key = (normalize_repository_path(directory), pipeline.name)
        self._by_path[key] = pipeline
        if reference_id is not None:
            self._by_reference[reference_id] = key
        if deleted:
            self._deleted.add(key)
        else:
            self._deleted.discard(key)

    def find_directory(self, path: Optional[str]) -> Optional[RepositoryDirectory]:
        wanted = normalize_repository_path(path)
        for directory, _ in self._by_path:
            if directory == wanted or directory.startswith(wanted.rstrip("/") + "/"):
                return RepositoryDirectory(path=wanted)
        return None

    def load_pipeline(
        self,
        name: str,
        directory: Optional[RepositoryDirectory],
        revision: Optional[str] = None,
        include_deleted: bool = True,
        monitor: Any = None,
    ) -> PipelineMeta:
        if directory is None:
            raise RepositoryError(
                message="Diretório de repositório não informado",
                details={"name": name},
            )
        key = (normalize_repository_path(directory.path), name)
        if key not in self._by_path:
            raise RepositoryError(
                message="Pipeline não encontrado no repositório",
                details={"name": name, "directory": directory.path},
            )
        if key in self._deleted and not include_deleted:
            raise RepositoryError(
                message="Pipeline removido do repositório",
                details={"name": name, "directory": directory.path},
            )
        return self._by_path[key]

    def load_pipeline_by_reference(self, reference_id: str, revision: Optional[str] = None) -> PipelineMeta:
        if reference_id not in self._by_reference:
            raise RepositoryError(
                message="Referência de objeto desconhecida",
                details={"reference_id": reference_id},
            )
        return self._by_path[self._by_reference[reference_id]]
