# src/atlas_lineage/core/lineage/types.py
"""
Tipos canônicos da resolução de recursos do Atlas Lineage.

Componentes principais:
    - AddressingMethod   → como uma referência a sub-pipeline é declarada
    - ResourceDirection  → orientação de um recurso (input/output)
    - ResourceDescriptor → unidade canônica de saída dos extratores

Princípios fundamentais:
    - Tipos são imutáveis e serializáveis
    - Enums possuem valores textuais canônicos
    - Nenhuma lógica de resolução vive neste módulo
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .dictionary import RESOURCE_FILE


class AddressingMethod(str, Enum):
    """
    Método de endereçamento de uma referência a sub-pipeline.

    Tipos definidos:
        - FILENAME: caminho de arquivo (plano, com esquema ou templatizado)
        - REPOSITORY_NAME: diretório + nome dentro de um repositório
        - REPOSITORY_REFERENCE: id imutável de objeto no repositório

    Invariantes:
        - Exatamente um método está ativo por referência
        - Apenas FILENAME e REPOSITORY_NAME possuem caminho textual
    """
    FILENAME = "filename"
    REPOSITORY_NAME = "repository_name"
    REPOSITORY_REFERENCE = "repository_reference"

    @property
    def has_path(self) -> bool:
        return self in (AddressingMethod.FILENAME, AddressingMethod.REPOSITORY_NAME)

    @classmethod
    def parse(cls, value: Any) -> Optional["AddressingMethod"]:
        """Aceita o próprio enum, o valor canônico ou o nome (case-insensitive).

        Retorna None para None/""; levanta ValueError para valores desconhecidos.
        """
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_")
        aliases = {
            "repository_by_name": cls.REPOSITORY_NAME,
            "repository_by_reference": cls.REPOSITORY_REFERENCE,
        }
        if text in aliases:
            return aliases[text]
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown addressing method: {value!r}")


class ResourceDirection(str, Enum):
    """Orientação de um recurso em relação ao Step que o toca."""
    INPUT = "input"
    OUTPUT = "output"

    @classmethod
    def from_writes(cls, writes: bool) -> "ResourceDirection":
        return cls.OUTPUT if writes else cls.INPUT


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Recurso externo resolvido e orientado.

    Campos:
        - location: local canônico, ciente de esquema (ex.: `/data/a.csv`,
          `ram:///tmp/a.csv`)
        - direction: input ou output
        - kind: tipo do recurso (v1: apenas `file`)
        - pipeline_name / step_name: origem, apenas para rastreabilidade

    Decisões arquiteturais:
        - Igualdade e hash consideram apenas `location` e `direction`;
          o mesmo recurso físico referenciado duas vezes pelo mesmo Step
          colapsa em um único descritor dentro de um `frozenset`
        - Steps diferentes mantêm conjuntos independentes no analyzer
    """
    location: str
    direction: ResourceDirection
    kind: str = field(default=RESOURCE_FILE, compare=False)
    pipeline_name: Optional[str] = field(default=None, compare=False)
    step_name: Optional[str] = field(default=None, compare=False)

    @property
    def is_input(self) -> bool:
        return self.direction is ResourceDirection.INPUT

    @property
    def is_output(self) -> bool:
        return self.direction is ResourceDirection.OUTPUT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location,
            "direction": self.direction.value,
            "kind": self.kind,
            "pipeline_name": self.pipeline_name,
            "step_name": self.step_name,
        }
