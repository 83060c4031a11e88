# src/atlas_lineage/core/lineage/document.py
"""
Documento de lineage: identidade + propriedades de um pipeline.

O documento é criado uma vez por objeto de topo analisado e entregue ao
graph builder. O graph builder é um colaborador externo; aqui existe
apenas o protocolo consumido e uma implementação em memória.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ..context import AnalysisContext, default_scope
from .dictionary import CONTEXT_RUNTIME, PROPERTY_NAME, PROPERTY_NAMESPACE, PROPERTY_PATH
from .normalizer import normalize_file_path


@dataclass(frozen=True)
class Namespace:
    namespace_id: str

    def __str__(self) -> str:
        return self.namespace_id


@dataclass(frozen=True)
class LineageDocument:
    """
    Documento imutável entregue ao graph builder.

    `string_id` é o identificador fornecido pelo chamador (normalmente o
    caminho de origem); `properties` carrega name, namespace e o caminho
    normalizado.
    """
    content: Any = field(compare=False, repr=False)
    namespace: Namespace
    string_id: str
    name: Optional[str]
    extension: Optional[str]
    context: str = CONTEXT_RUNTIME
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)

    def get_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


@runtime_checkable
class GraphBuilder(Protocol):
    def add_document(self, document: LineageDocument) -> None:
        ...


@dataclass
class InMemoryGraphBuilder:
    """Graph builder em memória: guarda documentos e arestas descobertas."""

    documents: List[LineageDocument] = field(default_factory=list)
    links: List[Tuple[str, str, str]] = field(default_factory=list)

    def add_document(self, document: LineageDocument) -> None:
        self.documents.append(document)

    def add_link(self, source: str, label: str, target: str) -> None:
        self.links.append((source, label, target))

    def document(self, string_id: str) -> Optional[LineageDocument]:
        for d in self.documents:
            if d.string_id == string_id:
                return d
        return None


def build_document(
    builder: Optional[GraphBuilder],
    content: Any,
    id: str,
    namespace: Namespace,
    scope: Optional[AnalysisContext] = None,
) -> Optional[LineageDocument]:
    """
    Constrói e registra o documento de lineage de `content`.

    Sem graph builder não há onde anexar o documento: devolve None.

    Raises:
        FileResolutionError: se `id` não puder ser normalizado (variante estrita).
    """
    if builder is None:
        return None

    scope = scope or default_scope()
    name = getattr(content, "name", None)
    properties = {
        PROPERTY_NAME: name,
        PROPERTY_NAMESPACE: namespace.namespace_id,
        PROPERTY_PATH: normalize_file_path(scope, id),
    }
    document = LineageDocument(
        content=content,
        namespace=namespace,
        string_id=id,
        name=name,
        extension=getattr(content, "default_extension", None),
        context=CONTEXT_RUNTIME,
        properties=properties,
    )
    builder.add_document(document)
    return document
