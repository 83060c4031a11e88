"""
Atlas Lineage — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas Lineage.
Erros são considerados artefatos de domínio e fazem parte do contrato
operacional do sistema, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Um analyzer que não consegue resolver um sub-pipeline registra o payload
correspondente contra o Step, em vez de abortar a análise do pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, List


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AtlasErrorPayload:
    """
    Payload canônico de erro do Atlas Lineage.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica se a análise depende de decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Falhas soft (best-effort)
PATH_NORMALIZATION_FAILED = "PATH_NORMALIZATION_FAILED"
SUBSTITUTION_UNRESOLVED = "SUBSTITUTION_UNRESOLVED"

# Falhas autoritativas
SUB_PIPELINE_UNRESOLVED = "SUB_PIPELINE_UNRESOLVED"
RESOURCE_EXTRACTION_FAILED = "RESOURCE_EXTRACTION_FAILED"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def path_normalization_failed(
    *,
    path: Optional[str],
    reason: Optional[str] = None,
    step: Optional[str] = None,
    hint: str = "Verifique se o esquema do caminho é suportado pelo VFS configurado.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=PATH_NORMALIZATION_FAILED,
        message="Caminho não pôde ser normalizado; valor original mantido",
        details={
            "path": path,
            "reason": reason,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def substitution_unresolved(
    *,
    template: str,
    missing_variables: List[str],
    step: Optional[str] = None,
    hint: str = "Declare as variáveis ausentes no ambiente do pipeline ou no pipeline pai.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=SUBSTITUTION_UNRESOLVED,
        message="Variáveis sem binding no template",
        details={
            "template": template,
            "missing_variables": missing_variables,
            "step": step,
        },
        hint=hint,
        decision_required=False,
    )


def sub_pipeline_unresolved(
    *,
    step: Optional[str],
    pipeline: Optional[str],
    reference: Dict[str, Any],
    attempts: List[Dict[str, Any]],
    hint: str = "Confira o método de endereçamento, o caminho declarado e a conexão com o repositório.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=SUB_PIPELINE_UNRESOLVED,
        message="Sub-pipeline não pôde ser carregado por nenhuma estratégia",
        details={
            "step": step,
            "pipeline": pipeline,
            "reference": reference,
            "attempts": attempts,
        },
        hint=hint,
        decision_required=False,
    )


def resource_extraction_failed(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique a configuração do Step. Nenhum fallback é aplicado automaticamente.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=RESOURCE_EXTRACTION_FAILED,
        message="Falha inesperada durante a extração de recursos",
        details={
            "step": step,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
        decision_required=False,
    )
