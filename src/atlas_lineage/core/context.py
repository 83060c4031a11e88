# src/atlas_lineage/core/context.py
"""
AnalysisContext — escopo canônico de uma análise de lineage.

O AnalysisContext é o `scope` recebido por todas as operações de
resolução. Ele reúne:
- o VFS ativo (como caminhos e URIs são resolvidos)
- o diretório de trabalho para caminhos relativos
- a configuração efetiva (ex.: política de substituição)
- o log estruturado de eventos e os warnings por Step

Princípios fundamentais:
- Isolamento por análise (cada análise possui seu próprio contexto)
- Falhas soft (normalização, substituição) viram eventos `WARNING`,
  nunca exceções
- Nenhum estado global: o VFS e o repositório são emprestados
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .config import DEFAULT_CONFIG, compute_config_hash, deep_merge, get_setting, validate_config
from .lineage.vfs import VirtualFileSystem


# step_id usado para eventos que não pertencem a um Step específico
CONTEXT_STEP_ID = "-"


@dataclass
class AnalysisContext:
    """
    Contexto de uma análise de lineage.

    Campos canônicos:
    - run_id: identificador único da análise
    - created_at: timestamp UTC de criação do contexto
    - config: configuração efetiva (ver `load_config`)
    - vfs: virtual filesystem usado para resolver caminhos
    - working_directory: base para caminhos relativos (None = cwd do processo)
    - meta: metadados livres (ex.: origem da análise)
    - events: log estruturado de eventos
    - warnings: warnings por step_id
    """

    run_id: str
    created_at: datetime
    config: Dict[str, Any] = field(default_factory=lambda: deep_merge(DEFAULT_CONFIG, {}))
    vfs: VirtualFileSystem = field(default_factory=VirtualFileSystem, repr=False)
    working_directory: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def create(
        cls,
        *,
        config: Optional[Dict[str, Any]] = None,
        vfs: Optional[VirtualFileSystem] = None,
        working_directory: Optional[str] = None,
        run_id: Optional[str] = None,
        **meta: Any,
    ) -> "AnalysisContext":
        """
        Cria um contexto com `config` mesclada sobre `DEFAULT_CONFIG`.

        Raises:
            ConfigTypeConflictError: override com tipo incompatível.
            InvalidSettingError: valor fora do domínio de uma chave conhecida.
        """
        effective = deep_merge(DEFAULT_CONFIG, config or {})
        validate_config(effective)
        return cls(
            run_id=run_id or f"analysis-{uuid.uuid4().hex[:12]}",
            created_at=datetime.now(timezone.utc),
            config=effective,
            vfs=vfs or VirtualFileSystem(),
            working_directory=working_directory,
            meta=dict(meta),
        )

    # -----------------------------
    # Configuração
    # -----------------------------
    @property
    def config_hash(self) -> str:
        return compute_config_hash(self.config)

    def setting(self, key: str, default: Any = None) -> Any:
        return get_setting(self.config, key, default)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)

    def warn(self, *, step_id: Optional[str], message: str, **extra: Any) -> None:
        """Registra uma falha soft: evento WARNING + warning do Step."""
        sid = step_id or CONTEXT_STEP_ID
        self.log(step_id=sid, level="WARNING", message=message, **extra)
        self.add_warning(step_id=sid, message=message)

    def events_at(self, level: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("level") == level]


def default_scope() -> AnalysisContext:
    """Contexto novo com VFS padrão e diretório de trabalho do processo."""
    return AnalysisContext.create(run_id="adhoc")
