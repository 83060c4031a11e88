# src/atlas_lineage/__init__.py
"""
Atlas Lineage: motor de resolução de recursos para lineage de pipelines ETL.

Dado um pipeline (transformation ou job composto de Steps), determina, para
cada Step, quais recursos externos ele lê ou escreve (arquivos,
sub-pipelines) e resolve seus locais finais, com variáveis substituídas e
caminhos normalizados.

Arquitetura em alto nível:
    - core.config  → carregamento, merge e hashing de configuração
    - core.context → escopo da análise (VFS, diretório, eventos, warnings)
    - core.lineage → normalizador, ambiente, resolvedores, extratores e documento
    - core.engine  → analyzer de referência que aplica os resolvedores por Step

Limites explícitos:
    - Não executa pipelines
    - Não valida semântica de pipelines além do endereçamento de recursos
    - Não persiste resultados
"""

from .core.config import load_config
from .core.context import AnalysisContext
from .core.engine.analyzer import AnalysisResult, PipelineAnalyzer, StepAnalysis, StepAnalysisStatus
from .core.exceptions import (
    AtlasException,
    DefinitionError,
    FileResolutionError,
    RepositoryError,
    ResolutionError,
    SubstitutionError,
)
from .core.lineage.definitions import load_pipeline_definition, parse_pipeline_definition
from .core.lineage.document import InMemoryGraphBuilder, LineageDocument, Namespace, build_document
from .core.lineage.environment import EnvironmentContext
from .core.lineage.extractors import extract_from_frame, extract_from_row, extract_static_resources
from .core.lineage.model import (
    DynamicFilenameSource,
    FileReader,
    FileWriter,
    PipelineMeta,
    PipelineReference,
    RowSchema,
    StepMeta,
)
from .core.lineage.normalizer import normalize_file_path, normalize_file_path_safely
from .core.lineage.repository import InMemoryRepository, RepositoryDirectory
from .core.lineage.subpipeline import resolve_sub_pipeline, resolve_sub_pipeline_path
from .core.lineage.types import AddressingMethod, ResourceDescriptor, ResourceDirection
from .core.lineage.vfs import FileHandle, VirtualFileSystem

__all__ = [
    "AddressingMethod",
    "AnalysisContext",
    "AnalysisResult",
    "AtlasException",
    "DefinitionError",
    "DynamicFilenameSource",
    "EnvironmentContext",
    "FileHandle",
    "FileReader",
    "FileResolutionError",
    "FileWriter",
    "InMemoryGraphBuilder",
    "InMemoryRepository",
    "LineageDocument",
    "Namespace",
    "PipelineAnalyzer",
    "PipelineMeta",
    "PipelineReference",
    "RepositoryDirectory",
    "RepositoryError",
    "ResolutionError",
    "ResourceDescriptor",
    "ResourceDirection",
    "RowSchema",
    "StepAnalysis",
    "StepAnalysisStatus",
    "StepMeta",
    "SubstitutionError",
    "VirtualFileSystem",
    "build_document",
    "extract_from_frame",
    "extract_from_row",
    "extract_static_resources",
    "load_config",
    "load_pipeline_definition",
    "normalize_file_path",
    "normalize_file_path_safely",
    "parse_pipeline_definition",
    "resolve_sub_pipeline",
    "resolve_sub_pipeline_path",
]
