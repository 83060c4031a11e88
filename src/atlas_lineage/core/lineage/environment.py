# src/atlas_lineage/core/lineage/environment.py
"""
Ambiente hierárquico de variáveis e adapter de substituição.

Este módulo define o `EnvironmentContext`, o escopo de variáveis de um
pipeline. Um ambiente pode ter um pai (o ambiente do pipeline que contém
o Step que chama este pipeline), formando uma cadeia explícita que é
percorrida de baixo para cima.

Sintaxes de token suportadas:
    - ${VAR}
    - %%VAR%%

Política para tokens sem binding (`unresolved_policy`):
    - drop → o token é removido do resultado (padrão)
    - keep → o token permanece literal
    - fail → `SubstitutionError` é levantada

Invariantes:
    - A busca nunca consulta estado global (ex.: `os.environ`)
    - O ambiente filho sempre tem precedência sobre o pai
    - Nenhuma instância é mutada após criada
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from ..exceptions import SubstitutionError


UNRESOLVED_DROP = "drop"
UNRESOLVED_KEEP = "keep"
UNRESOLVED_FAIL = "fail"

_TOKEN_RE = re.compile(r"\$\{([^{}]+)\}|%%([^%]+)%%")


def find_tokens(template: Optional[str]) -> List[str]:
    """Nomes de variáveis referenciados em `template`, na ordem em que aparecem."""
    if not template:
        return []
    return [m.group(1) or m.group(2) for m in _TOKEN_RE.finditer(template)]


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Escopo hierárquico de variáveis de um pipeline.

    Campos:
        - variables: bindings locais deste escopo
        - parent: escopo que contém este (ou None na raiz)
        - directory: diretório de trabalho deste escopo, se conhecido
        - repository: conexão de repositório ativa neste escopo, se houver
        - unresolved_policy: drop | keep | fail

    Decisões arquiteturais:
        - O repositório é uma capacidade emprestada; o ambiente não
          gerencia seu ciclo de vida
        - `unresolved_policy` é do próprio ambiente: cada pipeline decide
          como trata tokens sem binding
    """
    variables: Dict[str, Any] = field(default_factory=dict)
    parent: Optional["EnvironmentContext"] = field(default=None, repr=False)
    directory: Optional[str] = None
    repository: Any = field(default=None, repr=False, compare=False)
    unresolved_policy: str = UNRESOLVED_DROP

    def __post_init__(self) -> None:
        if self.unresolved_policy not in (UNRESOLVED_DROP, UNRESOLVED_KEEP, UNRESOLVED_FAIL):
            raise ValueError(f"Unknown unresolved_policy: {self.unresolved_policy!r}")

    # -----------------------------
    # Cadeia hierárquica
    # -----------------------------
    def parent_scope(self) -> Optional["EnvironmentContext"]:
        return self.parent

    def chain(self) -> Iterator["EnvironmentContext"]:
        """Percorre este escopo e seus ancestrais, do mais próximo à raiz."""
        scope: Optional[EnvironmentContext] = self
        while scope is not None:
            yield scope
            scope = scope.parent

    def working_directory(self) -> Optional[str]:
        for scope in self.chain():
            if scope.directory:
                return scope.directory
        return None

    def find_repository(self) -> Any:
        for scope in self.chain():
            if scope.repository is not None:
                return scope.repository
        return None

    def get_variable(self, name: str) -> Optional[str]:
        for scope in self.chain():
            if name in scope.variables and scope.variables[name] is not None:
                return str(scope.variables[name])
        return None

    def child(self, variables: Optional[Dict[str, Any]] = None, **changes: Any) -> "EnvironmentContext":
        """Cria um escopo filho herdando a política deste escopo."""
        changes.setdefault("unresolved_policy", self.unresolved_policy)
        return EnvironmentContext(variables=dict(variables or {}), parent=self, **changes)

    # -----------------------------
    # Substituição
    # -----------------------------
    def unresolved(self, template: Optional[str]) -> List[str]:
        return [name for name in find_tokens(template) if self.get_variable(name) is None]

    def substitute(self, template: Optional[str], policy: Optional[str] = None) -> Optional[str]:
        """
        Substitui tokens `${VAR}`/`%%VAR%%` pelos valores da cadeia de escopos.

        Args:
            template: texto com tokens (None é devolvido como None).
            policy: sobrescreve `unresolved_policy` apenas nesta chamada.

        Raises:
            SubstitutionError: sob política `fail`, se houver tokens sem binding.
        """
        if template is None:
            return None

        effective = policy or self.unresolved_policy
        missing = self.unresolved(template)
        if missing and effective == UNRESOLVED_FAIL:
            raise SubstitutionError(
                message="Variáveis sem binding no template",
                details={"template": template, "missing_variables": missing},
                hint="Declare as variáveis no pipeline ou em um pipeline pai.",
            )

        def _replace(match: "re.Match[str]") -> str:
            name = match.group(1) or match.group(2)
            value = self.get_variable(name)
            if value is not None:
                return value
            return match.group(0) if effective == UNRESOLVED_KEEP else ""

        return _TOKEN_RE.sub(_replace, template)
