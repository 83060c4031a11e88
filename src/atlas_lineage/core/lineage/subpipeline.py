# src/atlas_lineage/core/lineage/subpipeline.py
"""
Resolução de referências a sub-pipelines.

Este módulo expõe duas operações com contratos distintos:

    - resolve_sub_pipeline_path → caminho textual final de uma referência.
      Best-effort: nunca levanta; devolve None quando não há caminho.
    - resolve_sub_pipeline      → carrega o pipeline aninhado. Autoritativa:
      levanta `ResolutionError` quando nenhuma estratégia tem sucesso.

Estratégias de carga (ordem padrão):
    1. repository_reference → id imutável no repositório ativo
    2. repository_path      → diretório + nome no repositório ativo
    3. filesystem           → arquivo de definição lido pelo VFS

Cada estratégia devolve um `StrategyOutcome` (resolved, not_applicable ou
failed + motivo). Novas formas de endereçamento entram como novas
estratégias, sem alterar os chamadores.

Invariantes:
    - A referência nunca é mutada; a resolução produz novos valores
    - Com pipeline pai, tokens sem binding nunca sobrevivem literalmente
      no caminho resolvido
    - Toda tentativa fica registrada nos detalhes da `ResolutionError`
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..context import AnalysisContext, default_scope
from ..errors import substitution_unresolved
from ..exceptions import AtlasException, ResolutionError
from .definitions import load_pipeline_definition
from .dictionary import DEFAULT_EXTENSIONS
from .environment import UNRESOLVED_DROP, EnvironmentContext
from .model import PipelineMeta, PipelineReference, bind_steps
from .normalizer import normalize_file_path_safely
from .types import AddressingMethod
from .vfs import VirtualFileSystem


# -----------------------------
# Helpers de caminho
# -----------------------------

def _is_absolute(path: str) -> bool:
    return VirtualFileSystem.starts_with_scheme(path) or path.startswith("/") or os.path.isabs(path)


def _join(directory: str, path: str) -> str:
    if VirtualFileSystem.starts_with_scheme(directory):
        return posixpath.join(directory, path)
    return os.path.join(directory, path)


def _step_id(reference: PipelineReference) -> Optional[str]:
    return reference.step.name if reference.step is not None else None


def _with_extension(path: str, extension: Optional[str]) -> str:
    ext = (extension or "").strip().lstrip(".")
    if ext and not path.endswith("." + ext):
        return f"{path}.{ext}"
    return path


# -----------------------------
# Caminho
# -----------------------------

def resolve_sub_pipeline_path(
    meta: Optional[PipelineReference],
    sub_pipeline: Optional[PipelineMeta],
    scope: Optional[AnalysisContext] = None,
) -> Optional[str]:
    """
    Calcula o caminho final do sub-pipeline referenciado por `meta`.

    Regras:
        - Sem referência, ou método sem caminho textual → None
        - `sub_pipeline.path_and_name`, quando presente, sobrescreve o
          caminho declarado; a extensão padrão é acrescentada uma única vez
        - Com pipeline pai: variáveis são substituídas no ambiente dele
          (tokens sem binding são removidos) e caminhos relativos são
          ancorados no diretório dele
        - O resultado passa pelo normalizador seguro de `scope`

    Args:
        meta: referência declarada pelo Step.
        sub_pipeline: pipeline aninhado já resolvido, se houver.
        scope: contexto de análise (padrão: VFS local + cwd do processo).

    Returns:
        Optional[str]: caminho resolvido, ou None.
    """
    if meta is None:
        return None
    if meta.method is None or not meta.method.has_path:
        return None

    path = meta.declared_path
    if sub_pipeline is not None and (sub_pipeline.path_and_name or "").strip():
        path = _with_extension(sub_pipeline.path_and_name, sub_pipeline.default_extension)

    if not path:
        return None

    scope = scope or default_scope()
    step_id = _step_id(meta)
    parent = meta.parent_pipeline

    if parent is not None:
        missing = parent.environment.unresolved(path)
        if missing:
            payload = substitution_unresolved(template=path, missing_variables=missing, step=step_id)
            scope.warn(step_id=step_id, message=payload.message, error=payload.to_dict())
        path = parent.environment_substitute(path, policy=UNRESOLVED_DROP)
        if not path:
            return None

        directory = parent.working_directory()
        if directory and not _is_absolute(path):
            path = _join(directory, path)

    return normalize_file_path_safely(scope, path, step_id=step_id)


# -----------------------------
# Estratégias de carga
# -----------------------------

class StrategyStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


@dataclass(frozen=True)
class StrategyOutcome:
    strategy: str
    status: StrategyStatus
    pipeline: Optional[PipelineMeta] = None
    reason: Optional[str] = None

    @classmethod
    def resolved(cls, strategy: str, pipeline: PipelineMeta) -> "StrategyOutcome":
        return cls(strategy=strategy, status=StrategyStatus.RESOLVED, pipeline=pipeline)

    @classmethod
    def not_applicable(cls, strategy: str, reason: str) -> "StrategyOutcome":
        return cls(strategy=strategy, status=StrategyStatus.NOT_APPLICABLE, reason=reason)

    @classmethod
    def failed(cls, strategy: str, reason: str) -> "StrategyOutcome":
        return cls(strategy=strategy, status=StrategyStatus.FAILED, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {"strategy": self.strategy, "status": self.status.value, "reason": self.reason}


class ResolutionStrategy(Protocol):
    name: str

    def attempt(self, reference: PipelineReference, scope: AnalysisContext) -> StrategyOutcome:
        ...


def _owning_environment(reference: PipelineReference) -> EnvironmentContext:
    parent = reference.parent_pipeline
    return parent.environment if parent is not None else EnvironmentContext()


def _describe(exc: Exception) -> str:
    if isinstance(exc, AtlasException):
        return exc.message
    return f"{exc.__class__.__name__}: {exc}"


def _strip_known_extension(name: str) -> str:
    for ext in DEFAULT_EXTENSIONS.values():
        if name.endswith("." + ext):
            return name[: -(len(ext) + 1)]
    return name


class RepositoryReferenceStrategy:
    """Carrega pelo id imutável de objeto no repositório ativo."""

    name = "repository_reference"

    def attempt(self, reference: PipelineReference, scope: AnalysisContext) -> StrategyOutcome:
        if reference.method is not AddressingMethod.REPOSITORY_REFERENCE:
            return StrategyOutcome.not_applicable(self.name, "método não é repository_reference")
        repository = _owning_environment(reference).find_repository()
        if repository is None:
            return StrategyOutcome.not_applicable(self.name, "nenhum repositório ativo")
        if not reference.object_reference:
            return StrategyOutcome.failed(self.name, "referência de objeto ausente")
        try:
            pipeline = repository.load_pipeline_by_reference(reference.object_reference)
        except Exception as e:  # noqa: BLE001
            return StrategyOutcome.failed(self.name, _describe(e))
        return StrategyOutcome.resolved(self.name, pipeline)


class RepositoryPathStrategy:
    """Divide o caminho substituído em diretório + nome e carrega do repositório ativo."""

    name = "repository_path"

    def _locate(self, reference: PipelineReference, env: EnvironmentContext) -> Tuple[str, str]:
        if reference.file_name:
            path = env.substitute(reference.file_name) or ""
            directory, leaf = posixpath.split(path.replace("\\", "/"))
            return directory or "/", _strip_known_extension(leaf)
        directory = env.substitute(reference.directory_path) or "/"
        leaf = env.substitute(reference.pipeline_name) or ""
        return directory, _strip_known_extension(leaf)

    def attempt(self, reference: PipelineReference, scope: AnalysisContext) -> StrategyOutcome:
        if reference.method is None or not reference.method.has_path:
            return StrategyOutcome.not_applicable(self.name, "método sem caminho textual")
        env = _owning_environment(reference)
        repository = env.find_repository()
        if repository is None:
            return StrategyOutcome.not_applicable(self.name, "nenhum repositório ativo")
        if not reference.declared_path:
            return StrategyOutcome.failed(self.name, "nenhum caminho declarado")

        try:
            directory_path, name = self._locate(reference, env)
            if not name:
                return StrategyOutcome.failed(self.name, "nome do pipeline vazio após substituição")
            directory = repository.find_directory(directory_path)
            if directory is None:
                return StrategyOutcome.failed(self.name, f"diretório não encontrado: {directory_path}")
            pipeline = repository.load_pipeline(
                name,
                directory,
                None,
                bool(scope.setting("repository.include_deleted", True)),
                None,
            )
        except Exception as e:  # noqa: BLE001
            return StrategyOutcome.failed(self.name, _describe(e))
        return StrategyOutcome.resolved(self.name, pipeline)


class FilesystemStrategy:
    """Lê a definição do sub-pipeline pelo VFS do contexto."""

    name = "filesystem"

    def attempt(self, reference: PipelineReference, scope: AnalysisContext) -> StrategyOutcome:
        if reference.method is None or not reference.method.has_path:
            return StrategyOutcome.not_applicable(self.name, "método sem caminho textual")
        if not reference.declared_path:
            return StrategyOutcome.failed(self.name, "nenhum caminho declarado")

        env = _owning_environment(reference)
        parent = reference.parent_pipeline
        try:
            path = env.substitute(reference.declared_path) or ""
            if not path:
                return StrategyOutcome.failed(self.name, "caminho vazio após substituição")
            directory = parent.working_directory() if parent is not None else None
            if directory and not _is_absolute(path):
                path = _join(directory, path)
            if reference.method is AddressingMethod.REPOSITORY_NAME and not posixpath.splitext(path)[1]:
                kind_ext = parent.default_extension if parent is not None else None
                path = _with_extension(path, kind_ext or DEFAULT_EXTENSIONS["transformation"])
            caller_env = reference.step.environment if reference.step is not None else env
            pipeline = load_pipeline_definition(
                scope,
                path,
                parent_environment=caller_env,
                repository=env.find_repository(),
                parent_step=reference.step,
            )
        except Exception as e:  # noqa: BLE001
            return StrategyOutcome.failed(self.name, _describe(e))
        return StrategyOutcome.resolved(self.name, pipeline)


DEFAULT_STRATEGIES: Tuple[ResolutionStrategy, ...] = (
    RepositoryReferenceStrategy(),
    RepositoryPathStrategy(),
    FilesystemStrategy(),
)


# -----------------------------
# Carga
# -----------------------------

def _attach_to_caller(pipeline: PipelineMeta, reference: PipelineReference) -> PipelineMeta:
    """Liga o pipeline carregado ao Step chamador (parent_step + cadeia de ambiente)."""
    step = reference.step
    if step is None or pipeline.parent_step is step:
        return pipeline
    environment = pipeline.environment
    if environment.parent is None:
        environment = replace(environment, parent=step.environment)
    attached = replace(pipeline, parent_step=step, environment=environment)
    return bind_steps(attached, pipeline.steps)


def resolve_sub_pipeline(
    meta: Optional[PipelineReference],
    scope: Optional[AnalysisContext] = None,
    strategies: Optional[Sequence[ResolutionStrategy]] = None,
) -> PipelineMeta:
    """
    Carrega o pipeline aninhado referenciado por `meta`.

    As estratégias são tentadas em ordem; a primeira `resolved` vence.

    Raises:
        ResolutionError: referência ausente ou nenhuma estratégia resolveu.
            `details["attempts"]` lista o resultado de cada estratégia.
    """
    if meta is None:
        raise ResolutionError(
            message="Referência a sub-pipeline ausente",
            details={"reference": None, "attempts": []},
            hint="O Step não declara sub-pipeline.",
            reference=None,
        )
    if meta.step is None:
        raise ResolutionError(
            message="Referência a sub-pipeline sem Step dono",
            details={"reference": meta.to_dict(), "attempts": []},
            hint="Obtenha a referência via `StepMeta.sub_pipeline_reference`.",
            reference=meta,
        )

    scope = scope or default_scope()
    attempts: List[StrategyOutcome] = []
    for strategy in (strategies if strategies is not None else DEFAULT_STRATEGIES):
        outcome = strategy.attempt(meta, scope)
        attempts.append(outcome)
        if outcome.status is StrategyStatus.RESOLVED and outcome.pipeline is not None:
            scope.log(
                step_id=_step_id(meta) or "-",
                level="INFO",
                message="sub-pipeline resolved",
                strategy=outcome.strategy,
                pipeline=outcome.pipeline.name,
            )
            return _attach_to_caller(outcome.pipeline, meta)

    raise ResolutionError(
        message="Sub-pipeline não pôde ser carregado por nenhuma estratégia",
        details={
            "reference": meta.to_dict(),
            "attempts": [a.to_dict() for a in attempts],
        },
        hint="Confira o método de endereçamento, o caminho declarado e a conexão com o repositório.",
        reference=meta,
    )
