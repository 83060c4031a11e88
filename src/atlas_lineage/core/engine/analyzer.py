# src/atlas_lineage/core/engine/analyzer.py
"""
Analyzer de referência do Atlas Lineage.

Percorre os Steps de um pipeline e, para cada um, aplica os resolvedores
de lineage:
    - recursos estáticos (caminhos declarados)
    - caminho do sub-pipeline
    - carga do sub-pipeline (autoritativa)

Política de falhas:
    - Falhas soft (normalização, substituição) viram warnings do Step →
      status `partial`
    - `ResolutionError` é registrada no Step como payload
      `SUB_PIPELINE_UNRESOLVED` → status `failed`; a análise continua
    - Exceções inesperadas viram `AtlasErrorPayload` sem stack trace

Com `analyzer.follow_sub_pipelines`, sub-pipelines carregados são
analisados recursivamente até `analyzer.max_depth`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..context import CONTEXT_STEP_ID, AnalysisContext
from ..errors import (
    AtlasErrorPayload,
    resource_extraction_failed,
    sub_pipeline_unresolved,
)
from ..exceptions import AtlasException, ResolutionError
from ..lineage.document import GraphBuilder, LineageDocument, Namespace, build_document
from ..lineage.extractors import extract_static_resources
from ..lineage.model import PipelineMeta, StepMeta
from ..lineage.subpipeline import resolve_sub_pipeline, resolve_sub_pipeline_path
from ..lineage.types import ResourceDescriptor


class StepAnalysisStatus(str, Enum):
    RESOLVED = "resolved"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class StepAnalysis:
    """Resultado imutável da análise de um Step."""

    step_name: str
    pipeline_name: Optional[str]
    status: StepAnalysisStatus
    resources: FrozenSet[ResourceDescriptor] = frozenset()
    sub_pipeline_path: Optional[str] = None
    sub_pipeline: Optional["AnalysisResult"] = None
    warnings: List[str] = field(default_factory=list)
    error: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_name": self.step_name,
            "pipeline_name": self.pipeline_name,
            "status": self.status.value,
            "resources": sorted((r.to_dict() for r in self.resources), key=lambda d: (d["location"], d["direction"])),
            "sub_pipeline_path": self.sub_pipeline_path,
            "sub_pipeline": self.sub_pipeline.to_dict() if self.sub_pipeline is not None else None,
            "warnings": list(self.warnings),
            "error": self.error,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Resultado agregado da análise de um pipeline."""

    pipeline_name: Optional[str]
    depth: int = 0
    document: Optional[LineageDocument] = None
    steps: Dict[str, StepAnalysis] = field(default_factory=dict)

    @property
    def resources(self) -> FrozenSet[ResourceDescriptor]:
        out = set()
        for s in self.steps.values():
            out |= s.resources
        return frozenset(out)

    @property
    def failed_steps(self) -> List[str]:
        return [name for name, s in self.steps.items() if s.status is StepAnalysisStatus.FAILED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pipeline_name": self.pipeline_name,
            "depth": self.depth,
            "document": self.document.string_id if self.document is not None else None,
            "steps": {name: s.to_dict() for name, s in self.steps.items()},
        }


def _pipeline_key(pipeline: PipelineMeta) -> Tuple[Optional[str], Optional[str]]:
    return (pipeline.filename or pipeline.path_and_name, pipeline.name)


class PipelineAnalyzer:
    """Analyzer canônico: aplica os resolvedores de lineage sobre cada Step."""

    def __init__(self, ctx: AnalysisContext, builder: Optional[GraphBuilder] = None):
        self.ctx = ctx
        self.builder = builder

    def _follow_sub_pipelines(self) -> bool:
        return bool(self.ctx.setting("analyzer.follow_sub_pipelines", False))

    def _max_depth(self) -> int:
        return int(self.ctx.setting("analyzer.max_depth", 5))

    # ------------------------------------------------------------------
    # exceção -> AtlasErrorPayload
    # ------------------------------------------------------------------
    def _exception_to_error(self, exc: Exception, *, step: StepMeta) -> AtlasErrorPayload:
        if isinstance(exc, ResolutionError):
            attempts = list((exc.details or {}).get("attempts", []) or [])
            reference = exc.reference.to_dict() if exc.reference is not None else None
            return sub_pipeline_unresolved(
                step=step.name,
                pipeline=step.pipeline_name,
                reference=reference or {},
                attempts=attempts,
            )

        if isinstance(exc, AtlasException):
            return AtlasErrorPayload(
                type=exc.__class__.__name__,
                message=str(exc) or "Erro de resolução",
                details=dict(exc.details or {}),
                hint=exc.hint,
                decision_required=bool(exc.decision_required),
            )

        return resource_extraction_failed(
            step=step.name,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Links (best-effort; apenas builders que os suportam)
    # ------------------------------------------------------------------
    def _link(self, source: Optional[str], label: str, target: Optional[str]) -> None:
        add_link = getattr(self.builder, "add_link", None)
        if add_link is None or not source or not target:
            return
        add_link(source, label, target)

    # ------------------------------------------------------------------
    # Análise
    # ------------------------------------------------------------------
    def analyze(self, pipeline: PipelineMeta, document_id: Optional[str] = None) -> AnalysisResult:
        """
        Analisa `pipeline` e devolve um `AnalysisResult`.

        O documento do pipeline só é construído quando há graph builder;
        `document_id` padrão é o arquivo de origem (ou caminho + nome).

        Raises:
            FileResolutionError: se o id do documento não puder ser normalizado.
        """
        document: Optional[LineageDocument] = None
        if self.builder is not None:
            doc_id = document_id or pipeline.filename or pipeline.path_and_name or pipeline.name
            namespace = Namespace(str(self.ctx.setting("document.namespace", "default")))
            document = build_document(self.builder, pipeline, doc_id, namespace, self.ctx)

        self.ctx.log(
            step_id=CONTEXT_STEP_ID,
            level="INFO",
            message="analysis started",
            pipeline=pipeline.name,
            steps=len(pipeline.steps),
        )
        result = self._analyze(pipeline, depth=0, visited=(_pipeline_key(pipeline),), document=document)
        self.ctx.log(
            step_id=CONTEXT_STEP_ID,
            level="INFO",
            message="analysis finished",
            pipeline=pipeline.name,
            failed_steps=result.failed_steps,
        )
        return result

    def _analyze(
        self,
        pipeline: PipelineMeta,
        *,
        depth: int,
        visited: Tuple[Tuple[Optional[str], Optional[str]], ...],
        document: Optional[LineageDocument] = None,
    ) -> AnalysisResult:
        steps: Dict[str, StepAnalysis] = {}
        source = document.get_property("path") if document is not None else None
        for step in pipeline.steps:
            analysis = self._analyze_step(step, depth=depth, visited=visited)
            steps[step.name] = analysis
            for r in analysis.resources:
                self._link(source, "writes" if r.is_output else "reads", r.location)
            self._link(source, "executes", analysis.sub_pipeline_path)
        return AnalysisResult(pipeline_name=pipeline.name, depth=depth, document=document, steps=steps)

    def _analyze_step(
        self,
        step: StepMeta,
        *,
        depth: int,
        visited: Tuple[Tuple[Optional[str], Optional[str]], ...],
    ) -> StepAnalysis:
        sid = step.name
        warnings_before = len(self.ctx.warnings.get(sid, []))

        resources: FrozenSet[ResourceDescriptor] = frozenset()
        sub_path: Optional[str] = None
        sub_result: Optional[AnalysisResult] = None
        error: Optional[AtlasErrorPayload] = None
        reference = step.sub_pipeline_reference

        try:
            resources = extract_static_resources(self.ctx, step, step.declared_file_paths())

            if reference is not None:
                sub_pipeline = resolve_sub_pipeline(reference, self.ctx)
                sub_path = resolve_sub_pipeline_path(reference, sub_pipeline, self.ctx)
                sub_result = self._follow(sub_pipeline, step=step, depth=depth, visited=visited)
        except Exception as e:
            error = self._exception_to_error(e, step=step)
            if reference is not None and sub_path is None:
                # sem pipeline carregado, o caminho declarado ainda identifica a aresta
                sub_path = resolve_sub_pipeline_path(reference, None, self.ctx)
            self.ctx.log(
                step_id=sid,
                level="ERROR",
                message=error.message,
                error=error.to_dict(),
            )

        step_warnings = list(self.ctx.warnings.get(sid, [])[warnings_before:])
        if error is not None:
            status = StepAnalysisStatus.FAILED
        elif step_warnings:
            status = StepAnalysisStatus.PARTIAL
        else:
            status = StepAnalysisStatus.RESOLVED

        return StepAnalysis(
            step_name=sid,
            pipeline_name=step.pipeline_name,
            status=status,
            resources=resources,
            sub_pipeline_path=sub_path,
            sub_pipeline=sub_result,
            warnings=step_warnings,
            error=error.to_dict() if error is not None else None,
        )

    def _follow(
        self,
        sub_pipeline: PipelineMeta,
        *,
        step: StepMeta,
        depth: int,
        visited: Tuple[Tuple[Optional[str], Optional[str]], ...],
    ) -> Optional[AnalysisResult]:
        if not self._follow_sub_pipelines():
            return None
        if depth + 1 > self._max_depth():
            self.ctx.warn(
                step_id=step.name,
                message="Profundidade máxima de sub-pipelines atingida; recursão interrompida",
                pipeline=sub_pipeline.name,
                max_depth=self._max_depth(),
            )
            return None
        key = _pipeline_key(sub_pipeline)
        if key in visited:
            self.ctx.warn(
                step_id=step.name,
                message="Ciclo de sub-pipelines detectado; recursão interrompida",
                pipeline=sub_pipeline.name,
            )
            return None
        return self._analyze(sub_pipeline, depth=depth + 1, visited=visited + (key,))
